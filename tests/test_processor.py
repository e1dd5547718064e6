import json

import httpx
import pytest
from hal_client.errors import (
    HttpStatusError,
    ParseError,
    ResponseTooLargeError,
    UnsupportedResponse,
)
from hal_client.models import EmptyRoot, ResourceObject, ResourceRoot
from hal_client.processor import ResponseProcessor

URL = "https://api.example.com/orders/1"
DOC = {"prop": "v", "_links": {"self": {"href": "/r/1"}}}


def _response(status, *, content_type=None, body=b"", headers=None, method="GET"):
    all_headers = dict(headers or {})
    if content_type is not None:
        all_headers["Content-Type"] = content_type
    return httpx.Response(
        status,
        headers=all_headers,
        content=body,
        request=httpx.Request(method, URL),
    )


def _hal(status, doc=DOC, **kwargs):
    return _response(
        status,
        content_type="application/hal+json",
        body=json.dumps(doc).encode(),
        **kwargs,
    )


@pytest.mark.asyncio
async def test_hal_body_is_parsed_and_wrapped():
    result = await ResponseProcessor().process(_hal(200))

    assert isinstance(result, ResourceRoot)
    assert result.status_code == 200
    assert result.resource.properties == {"prop": "v"}
    assert result.resource.links["self"].href == "/r/1"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "content_type",
    ["application/hal+json", "Application/HAL+JSON", "application/hal+json; charset=utf-8"],
)
async def test_hal_content_type_matches_case_insensitively(content_type):
    response = _response(
        200, content_type=content_type, body=json.dumps(DOC).encode()
    )
    result = await ResponseProcessor().process(response)
    assert result.resource.get("prop") == "v"


@pytest.mark.asyncio
async def test_no_content_skips_parsing():
    class ExplodingParser:
        def parse(self, text):
            raise AssertionError("parser must not be called for 204")

    response = _response(204, content_type="application/hal+json")
    result = await ResponseProcessor(ExplodingParser()).process(response)

    assert isinstance(result, EmptyRoot)
    assert result.status_code == 204
    assert result.resource is None


@pytest.mark.asyncio
async def test_hal_error_document_keeps_its_status():
    result = await ResponseProcessor().process(_hal(404, {"message": "Not found"}))

    assert result.status_code == 404
    assert result.resource.get("message") == "Not found"


@pytest.mark.asyncio
@pytest.mark.parametrize("content_type", ["text/html", "application/json"])
async def test_unsupported_content_type_on_success(content_type):
    response = _response(200, content_type=content_type, body=b"<html></html>")
    with pytest.raises(UnsupportedResponse) as exc:
        await ResponseProcessor().process(response)

    assert exc.value.content_type == content_type
    assert content_type in str(exc.value)
    assert exc.value.status_code == 200


@pytest.mark.asyncio
async def test_missing_content_type_on_success():
    with pytest.raises(UnsupportedResponse) as exc:
        await ResponseProcessor().process(_response(200))

    assert exc.value.content_type is None
    assert "missing" in str(exc.value)


@pytest.mark.asyncio
async def test_missing_content_type_on_no_content_is_unsupported():
    with pytest.raises(UnsupportedResponse):
        await ResponseProcessor().process(_response(204))


@pytest.mark.asyncio
@pytest.mark.parametrize("status", [400, 401, 404, 500, 503])
async def test_missing_content_type_on_failure_is_http_error(status):
    with pytest.raises(HttpStatusError) as exc:
        await ResponseProcessor().process(_response(status, body=b"boom"))

    assert exc.value.status_code == status
    assert exc.value.method == "GET"
    assert exc.value.url == URL
    assert exc.value.response_text == "boom"


@pytest.mark.asyncio
async def test_wrong_content_type_on_failure_is_http_error():
    response = _response(500, content_type="text/html", body=b"<h1>oops</h1>")
    with pytest.raises(HttpStatusError) as exc:
        await ResponseProcessor().process(response)
    assert exc.value.status_code == 500


@pytest.mark.asyncio
async def test_only_first_content_type_counts():
    response = httpx.Response(
        200,
        headers=[
            ("Content-Type", "text/plain"),
            ("Content-Type", "application/hal+json"),
        ],
        content=json.dumps(DOC).encode(),
        request=httpx.Request("GET", URL),
    )
    with pytest.raises(UnsupportedResponse) as exc:
        await ResponseProcessor().process(response)
    assert exc.value.content_type == "text/plain"


@pytest.mark.asyncio
async def test_malformed_body_raises_parse_error():
    response = _response(200, content_type="application/hal+json", body=b"{nope")
    with pytest.raises(ParseError):
        await ResponseProcessor().process(response)


@pytest.mark.asyncio
async def test_injected_parser_receives_decoded_text():
    seen = []

    class RecordingParser:
        def parse(self, text):
            seen.append(text)
            return ResourceObject(properties={"raw": text})

    body = '{"name": "Zoë"}'.encode("utf-8")
    response = _response(200, content_type="application/hal+json", body=body)
    result = await ResponseProcessor(RecordingParser()).process(response)

    assert seen == ['{"name": "Zoë"}']
    assert result.resource.get("raw") == '{"name": "Zoë"}'


@pytest.mark.asyncio
async def test_declared_length_over_limit_is_rejected():
    processor = ResponseProcessor(max_response_bytes=10)
    with pytest.raises(ResponseTooLargeError) as exc:
        await processor.process(_hal(200))
    assert exc.value.limit == 10


@pytest.mark.asyncio
async def test_streamed_body_over_limit_is_rejected():
    async def chunks():
        yield b'{"a": "' + b"x" * 8
        yield b"x" * 8 + b'"}'

    response = httpx.Response(
        200,
        headers={"Content-Type": "application/hal+json"},
        content=chunks(),
        request=httpx.Request("GET", URL),
    )
    with pytest.raises(ResponseTooLargeError):
        await ResponseProcessor(max_response_bytes=16).process(response)


@pytest.mark.parametrize("status", [302, 303, 307])
def test_redirect_target_resolves_location(status):
    response = _response(status, headers={"Location": "/orders/2"})
    assert (
        ResponseProcessor.redirect_target(response)
        == "https://api.example.com/orders/2"
    )


def test_redirect_target_keeps_absolute_location():
    response = _response(302, headers={"Location": "https://other.example.com/x"})
    assert ResponseProcessor.redirect_target(response) == "https://other.example.com/x"


@pytest.mark.parametrize("status", [200, 201, 204, 301, 304, 308, 404])
def test_non_redirect_statuses_have_no_target(status):
    response = _response(status, headers={"Location": "/elsewhere"})
    assert ResponseProcessor.redirect_target(response) is None


def test_redirect_without_location_is_http_error():
    with pytest.raises(HttpStatusError) as exc:
        ResponseProcessor.redirect_target(_response(303))
    assert exc.value.status_code == 303
