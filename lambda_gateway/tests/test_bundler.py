"""
Where: lambda_gateway/tests/test_bundler.py
What: Unit tests for packaging and publishing route functions.
Why: Deploy-before-serve must produce a reproducible archive and a usable handle.
"""

import io
import zipfile
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from lambda_gateway.models.plugin import PlatformConfig, PluginConfig
from lambda_gateway.models.route import DeploySpec
from lambda_gateway.services.bundler import BundleError, Bundler

FUNCTION_ARN = "arn:aws:lambda:us-east-1:123456789012:function:reports"


def _conflict():
    return ClientError(
        {"Error": {"Code": "ResourceConflictException", "Message": "Function already exist"}},
        "CreateFunction",
    )


@pytest.fixture
def publishing_plugin():
    return PluginConfig(
        role="arn:aws:iam::123456789012:role/lambda-exec",
        config=PlatformConfig(region="us-east-1"),
    )


@pytest.fixture
def bundler(client_factory, gateway_config):
    return Bundler(client_factory, gateway_config)


def test_package_builds_zip_with_entry_module(bundler, function_source):
    spec = DeploySpec(source=function_source, export="handler")

    artifact = bundler.package(spec)

    assert artifact.handler == "index.handler"
    assert artifact.files == ("index.py",)
    with zipfile.ZipFile(io.BytesIO(artifact.zip_bytes)) as archive:
        assert archive.namelist() == ["index.py"]
        assert b"def handler" in archive.read("index.py")


def test_package_is_reproducible(bundler, function_source):
    spec = DeploySpec(source=function_source, export="handler")

    assert bundler.package(spec).code_sha256 == bundler.package(spec).code_sha256


def test_package_includes_extra_directories(bundler, tmp_path):
    source = tmp_path / "app.py"
    source.write_text("from lib.util import helper\n\nhandler = helper\n")
    lib = tmp_path / "lib"
    (lib / "__pycache__").mkdir(parents=True)
    (lib / "__init__.py").write_text("")
    (lib / "util.py").write_text("def helper(event, context):\n    return event\n")
    (lib / "__pycache__" / "util.cpython-312.pyc").write_bytes(b"\x00")

    artifact = bundler.package(DeploySpec(source=source, export="handler", include=[lib]))

    assert artifact.handler == "app.handler"
    assert set(artifact.files) == {"app.py", "lib/__init__.py", "lib/util.py"}


def test_package_rejects_missing_export(bundler, function_source):
    spec = DeploySpec(source=function_source, export="missing")

    with pytest.raises(BundleError, match="Export 'missing' not found"):
        bundler.package(spec)


def test_package_propagates_syntax_errors(bundler, tmp_path):
    source = tmp_path / "broken.py"
    source.write_text("def handler(:\n")

    with pytest.raises(SyntaxError):
        bundler.package(DeploySpec(source=source, export="handler"))


def test_bundle_without_platform_config_only_packages(bundler, client_factory, function_source):
    spec = DeploySpec(source=function_source, export="handler")

    result = bundler.bundle(spec, "reports", PluginConfig())

    assert result.handle is None
    assert result.artifact.handler == "index.handler"
    client_factory.create_client.assert_not_called()


def test_publish_creates_function(
    bundler, client_factory, lambda_client, function_source, publishing_plugin
):
    lambda_client.create_function.return_value = {
        "FunctionArn": FUNCTION_ARN,
        "Version": "$LATEST",
        "CodeSha256": "abc",
    }
    spec = DeploySpec(
        source=function_source,
        export="handler",
        timeout=10,
        environment={"STAGE": "test"},
    )

    result = bundler.bundle(spec, "reports", publishing_plugin)

    client_factory.create_client.assert_called_once_with(publishing_plugin.config)
    kwargs = lambda_client.create_function.call_args.kwargs
    assert kwargs["FunctionName"] == "reports"
    assert kwargs["Handler"] == "index.handler"
    assert kwargs["Runtime"] == "python3.12"
    assert kwargs["Role"] == publishing_plugin.role
    assert kwargs["Timeout"] == 10
    assert kwargs["Environment"] == {"Variables": {"STAGE": "test"}}
    assert kwargs["Code"]["ZipFile"] == result.artifact.zip_bytes

    assert result.handle.function_arn == FUNCTION_ARN
    assert result.handle.client is lambda_client
    assert result.handle.invoke_target == FUNCTION_ARN


def test_publish_updates_existing_function(
    bundler, lambda_client, function_source, publishing_plugin
):
    lambda_client.create_function.side_effect = _conflict()
    lambda_client.update_function_configuration.return_value = {"FunctionArn": FUNCTION_ARN}

    result = bundler.bundle(
        DeploySpec(source=function_source, export="handler"), "reports", publishing_plugin
    )

    lambda_client.update_function_code.assert_called_once_with(
        FunctionName="reports", ZipFile=result.artifact.zip_bytes
    )
    assert lambda_client.update_function_configuration.call_args.kwargs["Handler"] == (
        "index.handler"
    )
    assert result.handle.function_arn == FUNCTION_ARN


def test_publish_propagates_other_client_errors(
    bundler, lambda_client, function_source, publishing_plugin
):
    lambda_client.create_function.side_effect = ClientError(
        {"Error": {"Code": "AccessDeniedException", "Message": "denied"}}, "CreateFunction"
    )

    with pytest.raises(ClientError):
        bundler.bundle(
            DeploySpec(source=function_source, export="handler"), "reports", publishing_plugin
        )
    lambda_client.update_function_code.assert_not_called()


def test_publish_requires_role(bundler, function_source):
    plugin = PluginConfig(config=PlatformConfig(region="us-east-1"))

    with pytest.raises(BundleError, match="execution role"):
        bundler.bundle(DeploySpec(source=function_source, export="handler"), "reports", plugin)


def test_publish_waits_for_function_when_enabled(
    client_factory, lambda_client, gateway_config, function_source, publishing_plugin
):
    gateway_config.DEPLOY_WAIT = True
    lambda_client.create_function.return_value = {"FunctionArn": FUNCTION_ARN}
    waiter = MagicMock()
    lambda_client.get_waiter.return_value = waiter

    Bundler(client_factory, gateway_config).bundle(
        DeploySpec(source=function_source, export="handler"), "reports", publishing_plugin
    )

    lambda_client.get_waiter.assert_called_once_with("function_active_v2")
    waiter.wait.assert_called_once_with(FunctionName="reports")
