"""Unit tests for the dimension API client."""

from __future__ import annotations

import httpx
import pytest

from dp_clients.dimension import DimensionClient, GetAreasInput
from dp_clients.utils.exceptions import DecodeFailed, RequestFailed, UpstreamError


@pytest.mark.asyncio
async def test_get_area_types(json_response):
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return json_response({"area_types": [{"id": "ltla", "label": "LTLA", "total_count": 309}]})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
        client = DimensionClient("http://dimensions.host/v1", http)
        result = await client.get_area_types("user-token", "service-token", "Example")

    assert [(a.id, a.total_count) for a in result.area_types] == [("ltla", 309)]
    (request,) = seen
    assert request.url.path == "/v1/area-types"
    assert request.url.params["dataset"] == "Example"
    assert request.headers["X-Florence-Token"] == "user-token"
    assert request.headers["Authorization"] == "Bearer service-token"


@pytest.mark.asyncio
async def test_get_areas_with_text(json_response):
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return json_response({"areas": [{"id": "E06000001", "label": "Hartlepool", "area_type": "ltla"}]})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
        client = DimensionClient("http://dimensions.host", http)
        result = await client.get_areas(
            GetAreasInput(dataset_id="Example", area_type_id="ltla", text="hart")
        )

    assert result.areas[0].label == "Hartlepool"
    params = seen[0].url.params
    assert (params["dataset"], params["area-type"], params["text"]) == ("Example", "ltla", "hart")
    assert "Authorization" not in seen[0].headers


@pytest.mark.asyncio
async def test_get_areas_without_text_omits_param(json_response):
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return json_response({"areas": []})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
        await DimensionClient("http://dimensions.host", http).get_areas(
            GetAreasInput(dataset_id="Example", area_type_id="ltla")
        )

    assert "text" not in seen[0].url.params


@pytest.mark.asyncio
async def test_not_found_error_body_is_reported(json_response):
    def handler(request: httpx.Request) -> httpx.Response:
        return json_response({"errors": ["dataset not found"]}, status_code=404)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
        with pytest.raises(UpstreamError) as exc_info:
            await DimensionClient("http://dimensions.host", http).get_area_types("", "", "Missing")

    assert "error response from Dimensions API (404): dataset not found" in str(exc_info.value)
    assert exc_info.value.log_data["dataset_id"] == "Missing"


@pytest.mark.asyncio
async def test_other_status_reports_raw_body():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, text="internal error")

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
        with pytest.raises(UpstreamError, match=r"\(500\): internal error"):
            await DimensionClient("http://dimensions.host", http).get_area_types("", "", "Example")


@pytest.mark.asyncio
async def test_malformed_body_raises_decode_failed():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="{")

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
        with pytest.raises(DecodeFailed):
            await DimensionClient("http://dimensions.host", http).get_area_types("", "", "Example")


@pytest.mark.asyncio
async def test_transport_failure_raises_request_failed():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
        with pytest.raises(RequestFailed):
            await DimensionClient("http://dimensions.host", http).get_area_types("", "", "Example")
