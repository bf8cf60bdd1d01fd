"""
Route loader.

Loads routing.yml and builds RouteDefinitions for the registrar.
${VAR} references are substituted from the environment, and relative
`deploy.source` / `deploy.include` paths are resolved against the
directory holding the routing file.

Example:

    routes:
      - method: GET
        path: /users/{user_id}
        lambda:
          name: users-get
          setup: myapp.hooks:build_payload
      - method: POST
        path: /reports
        lambda:
          deploy:
            source: functions/reports.py
            export: handler
            environment:
              STAGE: ${STAGE}
"""

import logging
import os
import string
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import ValidationError

from ..core.exceptions import ConfigurationError
from ..models.route import RouteDefinition

logger = logging.getLogger("gateway.route_loader")


def _resolve_paths(lambda_config: Any, base_dir: Path) -> Any:
    if not isinstance(lambda_config, dict) or not isinstance(lambda_config.get("deploy"), dict):
        return lambda_config

    deploy = dict(lambda_config["deploy"])
    if isinstance(deploy.get("source"), str):
        deploy["source"] = str(base_dir / deploy["source"])
    if isinstance(deploy.get("include"), list):
        deploy["include"] = [
            str(base_dir / item) if isinstance(item, str) else item for item in deploy["include"]
        ]
    return {**lambda_config, "deploy": deploy}


class RouteLoader:
    def __init__(self, config_path: str):
        """
        Args:
            config_path: path of routing.yml
        """
        self.config_path = config_path

    def _read(self) -> Optional[Dict[str, Any]]:
        try:
            with open(self.config_path, "r", encoding="utf-8") as f:
                template = string.Template(f.read())
        except FileNotFoundError:
            logger.warning(f"Routing config not found at {self.config_path}")
            return None

        content = template.safe_substitute(os.environ)
        try:
            return yaml.safe_load(content) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(self.config_path, f"invalid YAML: {e}") from e

    def load_routes(self) -> List[RouteDefinition]:
        """
        Load routing.yml.

        Returns:
            RouteDefinitions in file order (empty when the file is missing)

        Raises:
            ConfigurationError: unparsable file or malformed route entry
        """
        cfg = self._read()
        if cfg is None:
            return []

        entries = cfg.get("routes") or []
        if not isinstance(entries, list):
            raise ConfigurationError(self.config_path, "'routes' must be a list")

        base_dir = Path(self.config_path).resolve().parent
        routes: List[RouteDefinition] = []
        for index, entry in enumerate(entries):
            if not isinstance(entry, dict):
                raise ConfigurationError(f"routes[{index}]", "route entry must be a mapping")

            entry = {**entry, "lambda": _resolve_paths(entry.get("lambda"), base_dir)}
            try:
                routes.append(RouteDefinition.model_validate(entry))
            except ValidationError as e:
                raise ConfigurationError(f"routes[{index}]", str(e)) from e

        logger.info(f"Loaded {len(routes)} routes from {self.config_path}")
        return routes
