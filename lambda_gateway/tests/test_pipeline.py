"""
Where: lambda_gateway/tests/test_pipeline.py
What: Unit tests for the per-request invocation pipeline.
Why: Every request outcome must map to exactly one HTTP response.
"""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.responses import PlainTextResponse

from lambda_gateway.core.exceptions import InvocationError, SetupError
from lambda_gateway.models.context import RequestContext
from lambda_gateway.models.function import FunctionHandle
from lambda_gateway.models.result import RemoteResult
from lambda_gateway.models.route import RouteLambdaConfig
from lambda_gateway.services.deployment_cache import DeploymentCache
from lambda_gateway.services.lambda_invoker import LambdaInvoker
from lambda_gateway.services.pipeline import InvocationPipeline

ROUTE_ID = "GET /users/{user_id}"


def _context():
    return RequestContext(
        route_id=ROUTE_ID,
        method="GET",
        path="/users/42",
        path_params={"user_id": "42"},
        request_id="req-1",
    )


@pytest.fixture
def invoker():
    invoker = MagicMock(spec=LambdaInvoker)
    invoker.invoke_function = AsyncMock(
        return_value=RemoteResult(payload={"id": 42}, raw=b'{"id": 42}', is_json=True)
    )
    invoker.invoke_handle = AsyncMock()
    return invoker


def _pipeline(invoker, cache=None, **config):
    config.setdefault("name", "users-get")
    return InvocationPipeline(
        ROUTE_ID, RouteLambdaConfig(**config), cache or DeploymentCache(), invoker
    )


@pytest.mark.asyncio
async def test_default_flow_returns_remote_payload(invoker):
    response = await _pipeline(invoker).process_request(_context())

    assert response.status_code == 200
    assert json.loads(response.body) == {"id": 42}

    function_name, payload = invoker.invoke_function.call_args.args
    assert function_name == "users-get"
    assert json.loads(payload)["request"]["params"] == {"user_id": "42"}


@pytest.mark.asyncio
async def test_setup_hook_output_is_the_payload(invoker):
    def setup(context):
        return {"user": context.path_params["user_id"]}

    await _pipeline(invoker, setup=setup).process_request(_context())

    _, payload = invoker.invoke_function.call_args.args
    assert json.loads(payload) == {"user": "42"}


@pytest.mark.asyncio
async def test_async_setup_hook_is_awaited(invoker):
    async def setup(context):
        return {"route": context.route_id}

    await _pipeline(invoker, setup=setup).process_request(_context())

    _, payload = invoker.invoke_function.call_args.args
    assert json.loads(payload) == {"route": ROUTE_ID}


@pytest.mark.asyncio
async def test_setup_failure_skips_invocation_and_returns_500(invoker):
    def setup(context):
        raise ValueError("bad input")

    response = await _pipeline(invoker, setup=setup).process_request(_context())

    assert response.status_code == 500
    assert json.loads(response.body) == {"message": "Internal Server Error"}
    invoker.invoke_function.assert_not_called()


@pytest.mark.asyncio
async def test_setup_returning_error_skips_invocation(invoker):
    def setup(context):
        return ValueError("bad input")

    pipeline = _pipeline(invoker, setup=setup)

    response = await pipeline.process_request(_context())

    assert response.status_code == 500
    invoker.invoke_function.assert_not_called()
    invoker.invoke_handle.assert_not_called()


@pytest.mark.asyncio
async def test_returned_setup_error_is_handed_to_complete(invoker):
    seen = {}

    async def setup(context):
        return ValueError("bad input")

    def complete(error, result, context):
        seen["error"] = error
        return PlainTextResponse("rejected", status_code=400)

    response = await _pipeline(invoker, setup=setup, complete=complete).process_request(
        _context()
    )

    assert response.status_code == 400
    assert isinstance(seen["error"], SetupError)
    assert str(seen["error"].cause) == "bad input"
    invoker.invoke_function.assert_not_called()


@pytest.mark.asyncio
async def test_setup_failure_is_handed_to_complete(invoker):
    seen = {}

    def setup(context):
        raise ValueError("bad input")

    def complete(error, result, context):
        seen["error"] = error
        seen["result"] = result
        return PlainTextResponse("rejected", status_code=400)

    response = await _pipeline(invoker, setup=setup, complete=complete).process_request(
        _context()
    )

    assert response.status_code == 400
    assert isinstance(seen["error"], SetupError)
    assert isinstance(seen["error"].cause, ValueError)
    assert seen["result"] is None
    invoker.invoke_function.assert_not_called()


@pytest.mark.asyncio
async def test_invocation_error_returns_500(invoker):
    invoker.invoke_function.side_effect = InvocationError("users-get", RuntimeError("down"))

    response = await _pipeline(invoker).process_request(_context())

    assert response.status_code == 500
    assert json.loads(response.body) == {"message": "Internal Server Error"}


@pytest.mark.asyncio
async def test_unexpected_invoker_failure_is_wrapped(invoker):
    invoker.invoke_function.side_effect = RuntimeError("unexpected")
    seen = {}

    def complete(error, result, context):
        seen["error"] = error
        return "handled"

    response = await _pipeline(invoker, complete=complete).process_request(_context())

    assert response.body == b"handled"
    assert isinstance(seen["error"], InvocationError)
    assert isinstance(seen["error"].cause, RuntimeError)


@pytest.mark.asyncio
async def test_complete_hook_return_value_is_the_response(invoker):
    def complete(error, result, context):
        assert error is None
        return "foobar"

    response = await _pipeline(invoker, complete=complete).process_request(_context())

    assert response.status_code == 200
    assert response.body == b"foobar"


@pytest.mark.asyncio
async def test_complete_hook_receives_remote_result(invoker):
    async def complete(error, result, context):
        return {"wrapped": result.payload, "route": context.route_id}

    response = await _pipeline(invoker, complete=complete).process_request(_context())

    assert json.loads(response.body) == {"wrapped": {"id": 42}, "route": ROUTE_ID}


@pytest.mark.asyncio
async def test_failing_complete_hook_returns_500(invoker):
    def complete(error, result, context):
        raise RuntimeError("finalizer broke")

    response = await _pipeline(invoker, complete=complete).process_request(_context())

    assert response.status_code == 500


@pytest.mark.asyncio
async def test_cached_handle_takes_precedence_over_name(invoker):
    handle = FunctionHandle(
        function_name="reports",
        function_arn="arn:aws:lambda:us-east-1:123456789012:function:reports",
        client=MagicMock(),
    )
    invoker.invoke_handle.return_value = RemoteResult(payload="ok", raw=b"ok")
    cache = DeploymentCache()
    cache.put(ROUTE_ID, handle)

    response = await _pipeline(invoker, cache=cache).process_request(_context())

    assert response.body == b"ok"
    invoker.invoke_handle.assert_awaited_once()
    assert invoker.invoke_handle.call_args.args[0] is handle
    invoker.invoke_function.assert_not_called()


@pytest.mark.asyncio
async def test_missing_result_without_error_returns_500(invoker):
    invoker.invoke_function.return_value = None

    response = await _pipeline(invoker).process_request(_context())

    assert response.status_code == 500
    assert json.loads(response.body) == {"message": "Internal Server Error"}
