"""Client for the Zebedee content store."""

from __future__ import annotations

import asyncio
from typing import TypeVar
from urllib.parse import quote

import httpx
from pydantic import BaseModel, TypeAdapter, ValidationError

from dp_clients.config import Settings
from dp_clients.utils.exceptions import (
    DecodeFailed,
    DPClientError,
    InvalidZebedeeResponse,
    RequestFailed,
    truncate_body,
)
from dp_clients.utils.logging import get_logger
from dp_clients.zebedee.models import (
    Breadcrumb,
    Dataset,
    DatasetLandingPage,
    Download,
    FileSize,
    PageTitle,
    Related,
    SupplementaryFile,
    TimeseriesMainFigure,
)

logger = get_logger(__name__)

FLORENCE_TOKEN_HEADER = "X-Florence-Token"
DEFAULT_MAX_CONCURRENCY = 10

# Left unescaped in request query strings; "/" is always escaped.
_QUERY_SAFE = "&=+$:@"

M = TypeVar("M", bound=BaseModel)

_breadcrumbs = TypeAdapter(list[Breadcrumb])


def _decode(model: type[M], body: bytes, path: str) -> M:
    try:
        return model.model_validate_json(body)
    except ValidationError as exc:
        snippet = truncate_body(body)
        raise DecodeFailed(
            f"failed to unmarshal zebedee response: {exc.errors()[0]['msg']}",
            body=snippet,
            reason=str(exc),
            log_data={"path": path, "response_body": snippet},
        ) from exc


class ZebedeeClient:
    """Reads published and in-collection pages from Zebedee.

    ``collection_id`` and ``locale`` are optional on every read; they scope the
    request to a collection and a language respectively.
    """

    def __init__(
        self,
        url: str,
        http_client: httpx.AsyncClient,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
    ) -> None:
        self._url = url.rstrip("/")
        self._http = http_client
        self._max_concurrency = max_concurrency

    @classmethod
    def from_settings(cls, settings: Settings, http_client: httpx.AsyncClient) -> ZebedeeClient:
        """Build a client from settings.

        The request timeout belongs to ``http_client``; build it with
        ``ZebedeeClient.timeout(settings)``.
        """
        return cls(
            settings.ZEBEDEE_URL,
            http_client,
            max_concurrency=settings.ENRICHMENT_MAX_CONCURRENCY,
        )

    @staticmethod
    def timeout(settings: Settings) -> httpx.Timeout:
        """Timeout to build the client's ``httpx.AsyncClient`` with."""
        return httpx.Timeout(float(settings.ZEBEDEE_REQUEST_TIMEOUT_SECONDS))

    def request_path(
        self,
        path: str,
        query: str,
        collection_id: str | None = None,
        locale: str | None = None,
    ) -> str:
        if collection_id:
            path += "/" + collection_id
        path += "?" + quote(query, safe=_QUERY_SAFE)
        if locale:
            path += "&lang=" + locale
        return path

    async def get(self, user_access_token: str, path: str) -> bytes:
        body, _ = await self._get(user_access_token, path)
        return body

    async def get_with_headers(self, user_access_token: str, path: str) -> tuple[bytes, httpx.Headers]:
        return await self._get(user_access_token, path)

    async def _get(self, user_access_token: str, path: str) -> tuple[bytes, httpx.Headers]:
        url = self._url + path
        headers = {FLORENCE_TOKEN_HEADER: user_access_token} if user_access_token else {}

        try:
            async with self._http.stream("GET", url, headers=headers) as response:
                if not 200 <= response.status_code <= 399:
                    await response.aread()
                    logger.warning("zebedee_request_rejected", path=path, status=response.status_code)
                    raise InvalidZebedeeResponse(response.status_code, response.url.path)
                body = await response.aread()
        except httpx.HTTPError as exc:
            logger.error("zebedee_request_failed", path=path, error=str(exc))
            raise RequestFailed(
                f"failed to get response from zebedee: {exc}",
                log_data={"url": url},
            ) from exc

        return body, response.headers

    async def get_breadcrumb(self, user_access_token: str, uri: str) -> list[Breadcrumb]:
        path = "/parents?uri=" + uri
        body = await self.get(user_access_token, path)
        try:
            return _breadcrumbs.validate_json(body)
        except ValidationError as exc:
            raise DecodeFailed(
                f"failed to unmarshal zebedee response: {exc.errors()[0]['msg']}",
                body=truncate_body(body),
                reason=str(exc),
                log_data={"path": path},
            ) from exc

    async def get_file_size(
        self,
        user_access_token: str,
        uri: str,
        collection_id: str | None = None,
        locale: str | None = None,
    ) -> FileSize:
        path = self.request_path("/filesize", "uri=" + uri, collection_id, locale)
        return _decode(FileSize, await self.get(user_access_token, path), path)

    async def get_page_title(
        self,
        user_access_token: str,
        uri: str,
        collection_id: str | None = None,
        locale: str | None = None,
    ) -> PageTitle:
        path = self.request_path("/data", "uri=" + uri + "&title", collection_id, locale)
        return _decode(PageTitle, await self.get(user_access_token, path), path)

    async def get_timeseries_main_figure(
        self,
        user_access_token: str,
        uri: str,
        collection_id: str | None = None,
        locale: str | None = None,
    ) -> TimeseriesMainFigure:
        path = self.request_path("/data", "uri=" + uri, collection_id, locale)
        return _decode(TimeseriesMainFigure, await self.get(user_access_token, path), path)

    async def get_dataset(
        self,
        user_access_token: str,
        uri: str,
        collection_id: str | None = None,
        locale: str | None = None,
    ) -> Dataset:
        """Fetch a dataset page and resolve the size of each of its files."""
        path = self.request_path("/data", "uri=" + uri, collection_id, locale)
        dataset = _decode(Dataset, await self.get(user_access_token, path), path)

        downloads = []
        for download in dataset.downloads:
            fs = await self.get_file_size(
                user_access_token, f"{uri}/{download.file}", collection_id, locale
            )
            downloads.append(Download(file=download.file, size=str(fs.size)))

        supplementary_files = []
        for supplementary in dataset.supplementary_files:
            fs = await self.get_file_size(
                user_access_token, f"{uri}/{supplementary.file}", collection_id, locale
            )
            supplementary_files.append(
                SupplementaryFile(
                    title=supplementary.title,
                    file=supplementary.file,
                    size=str(fs.size),
                )
            )

        return dataset.model_copy(
            update={"downloads": downloads, "supplementary_files": supplementary_files}
        )

    async def get_dataset_landing_page(
        self,
        user_access_token: str,
        path: str,
        collection_id: str | None = None,
        locale: str | None = None,
    ) -> DatasetLandingPage:
        """Fetch a landing page and fill in the title of every related page.

        Titles are resolved concurrently, at most ``max_concurrency`` at a time,
        and the call returns once every entry has been attempted. A title that
        cannot be fetched is logged and the entry keeps the title it came with.
        """
        request_path = self.request_path("/data", "uri=" + path, collection_id, locale)
        page = _decode(
            DatasetLandingPage,
            await self.get(user_access_token, request_path),
            request_path,
        )

        await self.resolve_related_titles(
            user_access_token, page.related_entries(), collection_id, locale
        )
        return page

    async def resolve_related_titles(
        self,
        user_access_token: str,
        entries: list[Related],
        collection_id: str | None = None,
        locale: str | None = None,
    ) -> int:
        """Set each entry's title from its page; returns how many failed.

        Every entry is attempted before an unexpected error is re-raised.
        """
        semaphore = asyncio.Semaphore(self._max_concurrency)

        async def resolve(entry: Related) -> bool:
            async with semaphore:
                try:
                    page_title = await self.get_page_title(
                        user_access_token, entry.uri, collection_id, locale
                    )
                except DPClientError as exc:
                    logger.warning("related_page_title_failed", uri=entry.uri, error=str(exc))
                    return False
            entry.title = page_title.title
            return True

        results = await asyncio.gather(
            *(resolve(entry) for entry in entries), return_exceptions=True
        )
        for result in results:
            if isinstance(result, BaseException):
                raise result
        failures = results.count(False)
        if failures:
            logger.warning("related_page_titles_incomplete", failed=failures, total=len(entries))
        return failures
