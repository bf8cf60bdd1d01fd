import io
import json
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from lambda_gateway.config import GatewayConfig
from lambda_gateway.services.lambda_client import LambdaClientFactory

FIXTURES_DIR = Path(__file__).parent / "fixtures"


def make_invoke_response(payload, function_error=None, status_code=200):
    """Shape of boto3 lambda.invoke() output, with a file-like Payload."""
    raw = payload if isinstance(payload, bytes) else json.dumps(payload).encode("utf-8")
    response = {
        "StatusCode": status_code,
        "Payload": io.BytesIO(raw),
        "ExecutedVersion": "$LATEST",
    }
    if function_error:
        response["FunctionError"] = function_error
    return response


@pytest.fixture
def gateway_config():
    return GatewayConfig(_env_file=None, DEPLOY_WAIT=False, LAMBDA_REGION=None)


@pytest.fixture
def lambda_client():
    client = MagicMock()
    client.invoke.side_effect = lambda **kwargs: make_invoke_response({"ok": True})
    return client


@pytest.fixture
def client_factory(lambda_client):
    factory = MagicMock(spec=LambdaClientFactory)
    factory.create_client.return_value = lambda_client
    return factory


@pytest.fixture
def function_source():
    return FIXTURES_DIR / "functions" / "index.py"
