"""
Bundler adapter.

Packages a route's function code into a Lambda zip archive and, when the
plugin carries platform credentials, publishes it and returns a live
FunctionHandle. Runs at most once per route, during registration.

Errors from packaging (OSError, SyntaxError, BundleError) and from the
platform (botocore ClientError/BotoCoreError, WaiterError) propagate
unmodified; the registrar wraps them in DeploymentError.
"""

import ast
import base64
import hashlib
import io
import logging
import zipfile
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from botocore.exceptions import ClientError

from ..config import GatewayConfig
from ..models.function import Artifact, BundleResult, FunctionHandle
from ..models.plugin import PluginConfig
from ..models.route import DeploySpec
from .lambda_client import LambdaClientFactory

logger = logging.getLogger("gateway.bundler")

# Fixed timestamp keeps the archive (and its CodeSha256) reproducible.
_ZIP_EPOCH = (1980, 1, 1, 0, 0, 0)
_FILE_MODE = 0o644 << 16
_SKIPPED_PARTS = {"__pycache__", ".git", ".venv", ".mypy_cache", ".pytest_cache"}


class BundleError(Exception):
    """Raised when the function code cannot be packaged."""

    pass


def _exported_names(tree: ast.Module) -> set:
    names = set()
    for node in tree.body:
        if isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef, ast.ClassDef)):
            names.add(node.name)
        elif isinstance(node, ast.Assign):
            for target in node.targets:
                if isinstance(target, ast.Name):
                    names.add(target.id)
        elif isinstance(node, ast.AnnAssign) and isinstance(node.target, ast.Name):
            names.add(node.target.id)
        elif isinstance(node, (ast.Import, ast.ImportFrom)):
            for alias in node.names:
                names.add((alias.asname or alias.name).split(".")[0])
    return names


def _collect_files(spec: DeploySpec) -> List[Tuple[str, Path]]:
    """List (archive name, path) pairs: the entry module first, then includes."""
    entries: List[Tuple[str, Path]] = [(spec.source.name, spec.source)]

    for include in spec.include:
        if include.is_file():
            entries.append((include.name, include))
            continue
        for path in sorted(include.rglob("*")):
            relative = path.relative_to(include.parent)
            if not path.is_file() or path.suffix == ".pyc":
                continue
            if any(part in _SKIPPED_PARTS for part in relative.parts):
                continue
            entries.append((relative.as_posix(), path))

    seen = set()
    for arcname, _ in entries:
        if arcname in seen:
            raise BundleError(f"Duplicate file in bundle: {arcname}")
        seen.add(arcname)
    return entries


class Bundler:
    def __init__(self, client_factory: LambdaClientFactory, config: GatewayConfig):
        """
        Args:
            client_factory: creates the boto3 client used for publishing
            config: GatewayConfig instance (runtime default, wait behavior)
        """
        self.client_factory = client_factory
        self.config = config

    def package(self, spec: DeploySpec) -> Artifact:
        """
        Build the deployment archive for `spec`.

        The entry module is parsed, never imported, to check that `export`
        is defined at its top level.
        """
        source_text = spec.source.read_text(encoding="utf-8")
        tree = ast.parse(source_text, filename=str(spec.source))
        if spec.export not in _exported_names(tree):
            raise BundleError(f"Export '{spec.export}' not found in {spec.source}")

        buffer = io.BytesIO()
        files = _collect_files(spec)
        with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
            for arcname, path in files:
                info = zipfile.ZipInfo(arcname, date_time=_ZIP_EPOCH)
                info.external_attr = _FILE_MODE
                info.compress_type = zipfile.ZIP_DEFLATED
                archive.writestr(info, path.read_bytes())

        zip_bytes = buffer.getvalue()
        digest = base64.b64encode(hashlib.sha256(zip_bytes).digest()).decode("ascii")

        artifact = Artifact(
            zip_bytes=zip_bytes,
            handler=spec.handler,
            code_sha256=digest,
            files=tuple(arcname for arcname, _ in files),
        )
        logger.info(
            f"Packaged {spec.source} ({artifact.size} bytes)",
            extra={"handler": artifact.handler, "code_sha256": digest, "files": len(files)},
        )
        return artifact

    def _function_settings(
        self, spec: DeploySpec, artifact: Artifact, plugin: PluginConfig
    ) -> Dict[str, Any]:
        settings: Dict[str, Any] = {
            "Runtime": spec.runtime or self.config.DEFAULT_RUNTIME,
            "Role": plugin.role,
            "Handler": artifact.handler,
            "Timeout": spec.timeout,
            "MemorySize": spec.memory_size,
            "Description": spec.description,
        }
        if spec.environment:
            settings["Environment"] = {"Variables": dict(spec.environment)}
        return settings

    def _wait(self, client: Any, waiter_name: str, function_name: str) -> None:
        if not self.config.DEPLOY_WAIT:
            return
        client.get_waiter(waiter_name).wait(FunctionName=function_name)

    def publish(
        self,
        artifact: Artifact,
        spec: DeploySpec,
        function_name: str,
        plugin: PluginConfig,
    ) -> FunctionHandle:
        """
        Create the function, or update its code and configuration if it exists.
        """
        if not plugin.role:
            raise BundleError("An execution role is required to publish functions")

        client = self.client_factory.create_client(plugin.config)
        settings = self._function_settings(spec, artifact, plugin)

        try:
            response = client.create_function(
                FunctionName=function_name,
                Code={"ZipFile": artifact.zip_bytes},
                PackageType="Zip",
                **settings,
            )
            self._wait(client, "function_active_v2", function_name)
            logger.info(f"Created function {function_name}")
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") != "ResourceConflictException":
                raise
            logger.info(f"Function {function_name} exists; updating code and configuration")
            client.update_function_code(FunctionName=function_name, ZipFile=artifact.zip_bytes)
            self._wait(client, "function_updated_v2", function_name)
            response = client.update_function_configuration(
                FunctionName=function_name, **settings
            )
            self._wait(client, "function_updated_v2", function_name)

        return FunctionHandle(
            function_name=function_name,
            function_arn=response.get("FunctionArn", ""),
            client=client,
            version=response.get("Version", "$LATEST"),
            code_sha256=response.get("CodeSha256", artifact.code_sha256),
        )

    def bundle(
        self, spec: DeploySpec, function_name: str, plugin: PluginConfig
    ) -> BundleResult:
        """
        Package `spec` and, when the plugin can publish, deploy it.

        Returns:
            BundleResult whose handle is None when publishing is disabled
        """
        artifact = self.package(spec)

        handle: Optional[FunctionHandle] = None
        if plugin.can_publish:
            handle = self.publish(artifact, spec, function_name, plugin)
        else:
            logger.warning(
                f"No platform config; {function_name} packaged but not published",
                extra={"function_name": function_name},
            )

        return BundleResult(artifact=artifact, handle=handle)
