"""Unit tests for the Zebedee client and related-page title enrichment."""

from __future__ import annotations

import asyncio

import httpx
import pytest

from dp_clients.utils.exceptions import DecodeFailed, InvalidZebedeeResponse, RequestFailed
from dp_clients.zebedee import ZebedeeClient

ZEBEDEE_URL = "http://zebedee.host"


def _landing_page(related_count: int) -> dict:
    related = [{"uri": f"/related/{i}", "title": ""} for i in range(related_count)]
    return {
        "type": "dataset_landing_page",
        "uri": "/economy/landing",
        "description": {"title": "Landing page"},
        "relatedDatasets": related[: related_count // 2],
        "relatedDocuments": related[related_count // 2 :],
        "relatedMethodology": [],
        "relatedMethodologyArticle": [],
    }


@pytest.mark.asyncio
async def test_landing_page_titles_enriched_with_bounded_concurrency(json_response):
    in_flight = 0
    max_in_flight = 0
    title_requests: list[str] = []

    async def handler(request: httpx.Request) -> httpx.Response:
        nonlocal in_flight, max_in_flight
        uri = request.url.params["uri"]
        if "title" not in request.url.params:
            return json_response(_landing_page(25))

        in_flight += 1
        max_in_flight = max(max_in_flight, in_flight)
        await asyncio.sleep(0.01)
        in_flight -= 1
        title_requests.append(uri)
        return json_response({"title": f"Title of {uri}"})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
        client = ZebedeeClient(ZEBEDEE_URL, http)
        page = await client.get_dataset_landing_page("token", "/economy/landing")

    entries = page.related_datasets + page.related_documents
    assert len(entries) == 25
    assert all(e.title == f"Title of {e.uri}" for e in entries)
    assert sorted(title_requests) == sorted(e.uri for e in entries)
    assert 1 < max_in_flight <= 10


@pytest.mark.asyncio
async def test_landing_page_title_failures_are_best_effort(json_response):
    async def handler(request: httpx.Request) -> httpx.Response:
        uri = request.url.params["uri"]
        if "title" not in request.url.params:
            page = _landing_page(4)
            page["relatedDatasets"][0]["title"] = "Original title"
            return json_response(page)
        if uri == "/related/0":
            return httpx.Response(500)
        return json_response({"title": f"Title of {uri}"})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
        client = ZebedeeClient(ZEBEDEE_URL, http)
        page = await client.get_dataset_landing_page("token", "/economy/landing")

    assert page.related_datasets[0].title == "Original title"
    assert page.related_datasets[1].title == "Title of /related/1"
    assert [d.title for d in page.related_documents] == ["Title of /related/2", "Title of /related/3"]


@pytest.mark.asyncio
async def test_resolve_related_titles_reports_failures(json_response):
    from dp_clients.zebedee.models import Related

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.params["uri"] == "/bad":
            return httpx.Response(404)
        return json_response({"title": "ok"})

    entries = [Related(uri="/good"), Related(uri="/bad")]
    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
        failures = await ZebedeeClient(ZEBEDEE_URL, http).resolve_related_titles("token", entries)

    assert failures == 1
    assert [e.title for e in entries] == ["ok", ""]


@pytest.mark.asyncio
async def test_get_sends_florence_token_and_accepts_redirects():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(304, content=b"cached")

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
        body = await ZebedeeClient(ZEBEDEE_URL, http).get("token", "/data?uri=/a")

    assert body == b"cached"
    assert seen[0].headers["X-Florence-Token"] == "token"


@pytest.mark.asyncio
async def test_get_invalid_status_raises_invalid_zebedee_response():
    async with httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(404))) as http:
        with pytest.raises(InvalidZebedeeResponse) as exc_info:
            await ZebedeeClient(ZEBEDEE_URL, http).get("token", "/data?uri=/a")

    err = exc_info.value
    assert err.status_code == 404
    assert str(err) == "invalid response from zebedee - should be 2.x.x or 3.x.x, got: 404, path: /data"


@pytest.mark.asyncio
async def test_get_transport_failure_raises_request_failed():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
        with pytest.raises(RequestFailed):
            await ZebedeeClient(ZEBEDEE_URL, http).get("token", "/data?uri=/a")


def test_request_path_with_collection_and_locale():
    client = ZebedeeClient(ZEBEDEE_URL, http_client=None)  # type: ignore[arg-type]

    path = client.request_path("/data", "uri=/a/b&title", collection_id="col-1", locale="cy")

    assert path == "/data/col-1?uri=%2Fa%2Fb&title&lang=cy"


def test_request_path_without_context():
    client = ZebedeeClient(ZEBEDEE_URL, http_client=None)  # type: ignore[arg-type]
    assert client.request_path("/filesize", "uri=/a") == "/filesize?uri=%2Fa"


@pytest.mark.asyncio
async def test_get_dataset_resolves_file_sizes(json_response):
    def handler(request: httpx.Request) -> httpx.Response:
        uri = request.url.params["uri"]
        if request.url.path == "/filesize":
            return json_response({"size": 1024 if uri.endswith(".csv") else 10})
        return json_response(
            {
                "type": "dataset",
                "uri": "/economy/ds",
                "downloads": [{"file": "data.csv"}],
                "supplementaryFiles": [{"title": "Notes", "file": "notes.txt"}],
            }
        )

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
        dataset = await ZebedeeClient(ZEBEDEE_URL, http).get_dataset("token", "/economy/ds")

    assert [(d.file, d.size) for d in dataset.downloads] == [("data.csv", "1024")]
    assert [(s.title, s.size) for s in dataset.supplementary_files] == [("Notes", "10")]


@pytest.mark.asyncio
async def test_get_dataset_file_size_failure_propagates(json_response):
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/filesize":
            return httpx.Response(500)
        return json_response({"downloads": [{"file": "data.csv"}]})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
        with pytest.raises(InvalidZebedeeResponse):
            await ZebedeeClient(ZEBEDEE_URL, http).get_dataset("token", "/economy/ds")


@pytest.mark.asyncio
async def test_get_breadcrumb(json_response):
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/parents"
        return json_response([{"uri": "/", "description": {"title": "Home"}}, {"uri": "/economy"}])

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
        crumbs = await ZebedeeClient(ZEBEDEE_URL, http).get_breadcrumb("token", "/economy/ds")

    assert [c.uri for c in crumbs] == ["/", "/economy"]
    assert crumbs[0].description.title == "Home"


@pytest.mark.asyncio
async def test_malformed_page_raises_decode_failed():
    async with httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(200, content=b"<html>"))) as http:
        with pytest.raises(DecodeFailed):
            await ZebedeeClient(ZEBEDEE_URL, http).get_page_title("token", "/a")


def test_from_settings(settings):
    client = ZebedeeClient.from_settings(settings, http_client=None)  # type: ignore[arg-type]
    assert client.request_path("/data", "uri=/a") == "/data?uri=%2Fa"
    assert ZebedeeClient.timeout(settings).read == 5.0


def test_request_path_escapes_reserved_punctuation():
    client = ZebedeeClient(ZEBEDEE_URL, http_client=None)  # type: ignore[arg-type]

    path = client.request_path("/data", "uri=/a/b(1),c;d!e*f'g")

    assert path == "/data?uri=%2Fa%2Fb%281%29%2Cc%3Bd%21e%2Af%27g"


@pytest.mark.asyncio
async def test_unexpected_title_error_raised_after_every_entry_attempted():
    from dp_clients.zebedee.models import PageTitle, Related

    entries = [Related(uri="/boom")] + [Related(uri=f"/slow/{i}") for i in range(15)]
    finished: list[str] = []

    async def fake_page_title(token, uri, collection_id=None, locale=None):
        if uri == "/boom":
            raise RuntimeError("unexpected")
        await asyncio.sleep(0.01)
        finished.append(uri)
        return PageTitle(title=f"Title of {uri}")

    client = ZebedeeClient(ZEBEDEE_URL, http_client=None)  # type: ignore[arg-type]
    client.get_page_title = fake_page_title  # type: ignore[method-assign]

    with pytest.raises(RuntimeError, match="unexpected"):
        await client.resolve_related_titles("token", entries)

    assert sorted(finished) == sorted(e.uri for e in entries[1:])
    assert all(e.title == f"Title of {e.uri}" for e in entries[1:])


@pytest.mark.asyncio
async def test_get_with_headers_returns_response_headers():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            content=b'{"title": "Page"}',
            headers={"Content-Type": "application/json", "ETag": "abc123"},
        )

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
        body, headers = await ZebedeeClient(ZEBEDEE_URL, http).get_with_headers("token", "/data?uri=/a")

    assert body == b'{"title": "Page"}'
    assert headers["ETag"] == "abc123"
    assert headers["Content-Type"] == "application/json"


@pytest.mark.asyncio
async def test_get_timeseries_main_figure(json_response):
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return json_response(
            {
                "type": "timeseries",
                "uri": "/economy/ts/abmi",
                "description": {"cdid": "ABMI", "unit": "m", "preUnit": "£", "releaseDate": "2021-05-12"},
                "years": [{"date": "2020", "value": "1959.7", "year": "2020"}],
                "months": [],
                "relatedDocuments": [{"uri": "/economy/bulletin"}],
            }
        )

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
        figure = await ZebedeeClient(ZEBEDEE_URL, http).get_timeseries_main_figure(
            "token", "/economy/ts/abmi", collection_id="col-1", locale="cy"
        )

    assert figure.description.cdid == "ABMI"
    assert figure.description.pre_unit == "£"
    assert [(y.date, y.value) for y in figure.years] == [("2020", "1959.7")]
    assert figure.related_documents[0].uri == "/economy/bulletin"
    (request,) = seen
    assert request.url.path == "/data/col-1"
    assert request.url.params["uri"] == "/economy/ts/abmi"
    assert request.url.params["lang"] == "cy"
