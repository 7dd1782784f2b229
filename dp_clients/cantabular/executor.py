"""Transport for Cantabular GraphQL queries."""

from __future__ import annotations

from typing import Protocol

import httpx

from dp_clients.cantabular.queries import QueryData
from dp_clients.utils.exceptions import EncodingFailed, RequestFailed, error_response
from dp_clients.utils.logging import get_logger

logger = get_logger(__name__)

SERVICE = "cantabular-ext-api"


class GraphQLExecutor(Protocol):
    """Sends one query and returns the raw response body."""

    async def execute(self, query: str, data: QueryData) -> bytes: ...


class HTTPGraphQLExecutor:
    """POSTs queries to ``<ext_api_host>/graphql`` with the caller's HTTP client.

    One request per call and no retries; retry policy belongs to the
    transport the ``httpx.AsyncClient`` was built with.
    """

    def __init__(self, ext_api_host: str, http_client: httpx.AsyncClient) -> None:
        self._url = f"{ext_api_host.rstrip('/')}/graphql"
        self._http = http_client

    @property
    def url(self) -> str:
        return self._url

    async def execute(self, query: str, data: QueryData) -> bytes:
        log_data = {"url": self._url, "query_data": data.model_dump()}
        try:
            payload = data.encode(query)
        except EncodingFailed as exc:
            exc.log_data.update(log_data)
            raise

        logger.info("graphql_query_posted", url=self._url, dataset=data.dataset)
        try:
            async with self._http.stream(
                "POST",
                self._url,
                content=payload,
                headers={"Content-Type": "application/json"},
            ) as response:
                body = await response.aread()
        except httpx.HTTPError as exc:
            logger.error("graphql_query_failed", url=self._url, error=str(exc))
            raise RequestFailed(
                f"failed to make GraphQL query: {exc}",
                log_data=log_data,
            ) from exc

        if response.status_code != httpx.codes.OK:
            err = error_response(self._url, response, SERVICE)
            err.log_data.update(log_data)
            logger.warning(
                "graphql_query_rejected",
                url=self._url,
                status=response.status_code,
                dataset=data.dataset,
            )
            raise err

        return body
