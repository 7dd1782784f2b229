"""Cantabular client: GraphQL queries against the extended API plus the REST codebook."""

from __future__ import annotations

from typing import Any, Callable, TypeVar

import httpx
from pydantic import ValidationError

from dp_clients.cantabular import gql, normalize
from dp_clients.cantabular.executor import GraphQLExecutor, HTTPGraphQLExecutor
from dp_clients.cantabular.models import (
    Area,
    Dimension,
    DimensionSearchResult,
    GetCodebookResponse,
    StaticDatasetTable,
)
from dp_clients.cantabular.queries import (
    QUERY_AREAS_BY_AREA,
    QUERY_DIMENSION_OPTIONS,
    QUERY_DIMENSIONS,
    QUERY_DIMENSIONS_BY_NAME,
    QUERY_DIMENSIONS_SEARCH,
    QUERY_GEOGRAPHY_DIMENSIONS,
    QUERY_LIST_DATASETS,
    QUERY_STATIC_DATASET,
    Filter,
    QueryData,
)
from dp_clients.config import Settings
from dp_clients.utils.exceptions import DecodeFailed, RequestFailed, error_response, truncate_body
from dp_clients.utils.logging import get_logger

logger = get_logger(__name__)

SERVICE = "cantabular"

T = TypeVar("T")


class CantabularClient:
    """Typed access to Cantabular datasets, dimensions and areas.

    GraphQL calls go through ``executor``; by default an HTTPGraphQLExecutor
    bound to ``ext_api_host`` and the caller's ``http_client``.
    """

    def __init__(
        self,
        host: str,
        ext_api_host: str,
        http_client: httpx.AsyncClient,
        executor: GraphQLExecutor | None = None,
    ) -> None:
        self._host = host.rstrip("/")
        self._ext_api_host = ext_api_host.rstrip("/")
        self._http = http_client
        self._executor = executor or HTTPGraphQLExecutor(self._ext_api_host, http_client)

    @classmethod
    def from_settings(
        cls, settings: Settings, http_client: httpx.AsyncClient
    ) -> CantabularClient:
        return cls(settings.CANTABULAR_URL, settings.CANTABULAR_EXT_API_URL, http_client)

    @staticmethod
    def timeout(settings: Settings) -> httpx.Timeout:
        """Timeout to build the client's ``httpx.AsyncClient`` with."""
        return httpx.Timeout(settings.HTTP_TIMEOUT_SECONDS)

    @property
    def graphql_url(self) -> str:
        return f"{self._ext_api_host}/graphql"

    async def query(
        self,
        query: str,
        data: QueryData,
        project: Callable[[gql.GraphResponse], T],
    ) -> T:
        """Run a catalog query and project the decoded graph onto a result type."""
        body = await self._executor.execute(query, data)
        response = gql.decode_response(
            body,
            log_data={"url": self.graphql_url, "query_data": data.model_dump()},
        )
        return project(response)

    async def list_datasets(self) -> list[str]:
        return await self.query(QUERY_LIST_DATASETS, QueryData(), normalize.dataset_names)

    async def get_dimensions(self, dataset: str) -> list[Dimension]:
        return await self.query(
            QUERY_DIMENSIONS, QueryData(dataset=dataset), normalize.dimensions
        )

    async def get_dimensions_by_name(self, dataset: str, variables: list[str]) -> list[Dimension]:
        return await self.query(
            QUERY_DIMENSIONS_BY_NAME,
            QueryData(dataset=dataset, variables=variables),
            normalize.dimensions,
        )

    async def get_geography_dimensions(self, dataset: str) -> list[Dimension]:
        return await self.query(
            QUERY_GEOGRAPHY_DIMENSIONS,
            QueryData(dataset=dataset),
            normalize.geography_dimensions,
        )

    async def search_dimensions(self, dataset: str, text: str) -> list[DimensionSearchResult]:
        return await self.query(
            QUERY_DIMENSIONS_SEARCH,
            QueryData(dataset=dataset, text=text),
            normalize.dimension_search_results,
        )

    async def search_areas(self, dataset: str, text: str) -> list[Area]:
        return await self.query(
            QUERY_AREAS_BY_AREA,
            QueryData(dataset=dataset, text=text),
            normalize.area_search_results,
        )

    async def get_static_dataset(
        self,
        dataset: str,
        variables: list[str],
        filters: list[Filter] | None = None,
    ) -> StaticDatasetTable:
        return await self.query(
            QUERY_STATIC_DATASET,
            QueryData(dataset=dataset, variables=variables, filters=filters or []),
            normalize.static_dataset_table,
        )

    async def get_dimension_options(
        self,
        dataset: str,
        variables: list[str],
        filters: list[Filter] | None = None,
    ) -> StaticDatasetTable:
        return await self.query(
            QUERY_DIMENSION_OPTIONS,
            QueryData(dataset=dataset, variables=variables, filters=filters or []),
            normalize.static_dataset_table,
        )

    async def get_codebook(
        self,
        dataset: str,
        variables: list[str] | None = None,
        categories: bool = False,
    ) -> GetCodebookResponse:
        """GET the v8 codebook for ``dataset``, optionally with category codes."""
        url = f"{self._host}/v8/codebook/{dataset}"
        params: list[tuple[str, str]] = [("cats", "true" if categories else "false")]
        params.extend(("v", v) for v in variables or [])
        log_data: dict[str, Any] = {"url": url, "dataset": dataset, "variables": variables or []}

        logger.info("codebook_requested", url=url, dataset=dataset)
        try:
            response = await self._http.get(url, params=params)
        except httpx.HTTPError as exc:
            raise RequestFailed(
                f"failed to get response from Cantabular API: {exc}",
                log_data=log_data,
            ) from exc

        if response.status_code != httpx.codes.OK:
            err = error_response(url, response, SERVICE)
            err.log_data.update(log_data)
            raise err

        if not response.content:
            raise DecodeFailed(
                "failed to unmarshal response body: empty body",
                body="[response body empty]",
                reason="empty body",
                log_data={**log_data, "response_body": "[response body empty]"},
            )

        try:
            return GetCodebookResponse.model_validate_json(response.content)
        except ValidationError as exc:
            snippet = truncate_body(response.content)
            raise DecodeFailed(
                f"failed to unmarshal response body: {exc.errors()[0]['msg']}",
                body=snippet,
                reason=str(exc),
                log_data={**log_data, "response_body": snippet},
            ) from exc
