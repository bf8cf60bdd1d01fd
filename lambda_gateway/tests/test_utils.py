import io
import json

from fastapi.responses import PlainTextResponse

from lambda_gateway.core.utils import (
    encode_payload,
    error_response,
    parse_invoke_response,
    render_hook_response,
    render_remote_result,
)
from lambda_gateway.models.result import RemoteResult


def test_encode_payload_json_encodes_values():
    assert json.loads(encode_payload({"a": [1, 2]})) == {"a": [1, 2]}


def test_encode_payload_passes_bytes_through():
    assert encode_payload(b"raw") == b"raw"


def test_parse_invoke_response_reads_streaming_payload():
    result = parse_invoke_response(
        {"StatusCode": 200, "Payload": io.BytesIO(b'{"hello": "world"}'), "ExecutedVersion": "3"}
    )

    assert result.payload == {"hello": "world"}
    assert result.is_json
    assert result.executed_version == "3"
    assert not result.is_logic_error


def test_parse_invoke_response_keeps_non_json_as_text():
    result = parse_invoke_response({"StatusCode": 200, "Payload": b"plain text"})

    assert result.payload == "plain text"
    assert not result.is_json
    assert result.raw == b"plain text"


def test_parse_invoke_response_flags_function_error():
    result = parse_invoke_response(
        {
            "StatusCode": 200,
            "FunctionError": "Unhandled",
            "Payload": io.BytesIO(b'{"errorMessage": "boom"}'),
        }
    )

    assert result.is_logic_error
    assert result.payload["errorMessage"] == "boom"


def test_parse_invoke_response_without_payload():
    result = parse_invoke_response({"StatusCode": 202})

    assert result.status_code == 202
    assert result.payload is None
    assert result.raw == b""


def test_render_remote_result_json_and_raw():
    json_result = RemoteResult(payload={"a": 1}, raw=b'{"a":1}', is_json=True)
    json_response = render_remote_result(json_result)
    raw_response = render_remote_result(RemoteResult(payload="text", raw=b"text"))

    assert json_response.status_code == 200
    assert json.loads(json_response.body) == {"a": 1}
    assert raw_response.status_code == 200
    assert raw_response.body == b"text"


def test_render_hook_response_variants():
    response = PlainTextResponse("custom", status_code=418)

    assert render_hook_response(response) is response
    assert render_hook_response("foobar").body == b"foobar"
    assert render_hook_response(b"\x00").media_type == "application/octet-stream"
    assert json.loads(render_hook_response({"a": 1}).body) == {"a": 1}


def test_error_response_hides_details():
    response = error_response()

    assert response.status_code == 500
    assert json.loads(response.body) == {"message": "Internal Server Error"}
