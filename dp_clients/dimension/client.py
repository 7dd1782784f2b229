"""Client for the Cantabular dimension API (area types and areas)."""

from __future__ import annotations

from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from dp_clients.config import Settings
from dp_clients.dimension.models import (
    ErrorResp,
    GetAreasInput,
    GetAreasResponse,
    GetAreaTypesResponse,
)
from dp_clients.utils.exceptions import DecodeFailed, RequestFailed, UpstreamError, truncate_body
from dp_clients.utils.logging import get_logger

logger = get_logger(__name__)

SERVICE = "cantabular-dimension-api"
FLORENCE_TOKEN_HEADER = "X-Florence-Token"

M = TypeVar("M", bound=BaseModel)


def auth_headers(user_auth_token: str = "", service_auth_token: str = "") -> dict[str, str]:
    headers = {}
    if user_auth_token:
        headers[FLORENCE_TOKEN_HEADER] = user_auth_token
    if service_auth_token:
        headers["Authorization"] = f"Bearer {service_auth_token}"
    return headers


def check_get_response(response: httpx.Response) -> None:
    """Raise UpstreamError for anything but a 200 whose body has been read."""
    if response.status_code == httpx.codes.NOT_FOUND:
        try:
            error_resp = ErrorResp.model_validate_json(response.content)
        except ValidationError:
            error_resp = None
        if error_resp is not None and error_resp.errors:
            raise UpstreamError(
                f"error response from Dimensions API ({response.status_code}): "
                + ", ".join(error_resp.errors),
                status_code=500,
                body=response.text,
            )

    if response.status_code != httpx.codes.OK:
        raise UpstreamError(
            f"error response from Dimensions API ({response.status_code}): {truncate_body(response.text)}",
            status_code=500,
            body=response.text,
        )


class DimensionClient:
    def __init__(self, base_url: str, http_client: httpx.AsyncClient) -> None:
        # Relative paths join under the base path only with a trailing slash.
        self._base_url = httpx.URL(base_url if base_url.endswith("/") else base_url + "/")
        self._http = http_client

    @classmethod
    def from_settings(cls, settings: Settings, http_client: httpx.AsyncClient) -> DimensionClient:
        return cls(settings.DIMENSIONS_API_URL, http_client)

    @staticmethod
    def timeout(settings: Settings) -> httpx.Timeout:
        return httpx.Timeout(settings.HTTP_TIMEOUT_SECONDS)

    async def get_area_types(
        self,
        user_auth_token: str,
        service_auth_token: str,
        dataset_id: str,
    ) -> GetAreaTypesResponse:
        log_data = {"method": "GET", "dataset_id": dataset_id}
        return await self._get(
            "getting area types",
            "area-types",
            {"dataset": dataset_id},
            auth_headers(user_auth_token, service_auth_token),
            GetAreaTypesResponse,
            log_data,
        )

    async def get_areas(self, req: GetAreasInput) -> GetAreasResponse:
        log_data = {
            "method": "GET",
            "dataset_id": req.dataset_id,
            "area_type_id": req.area_type_id,
            "text": req.text,
        }
        params = {"dataset": req.dataset_id, "area-type": req.area_type_id}
        if req.text:
            params["text"] = req.text
        return await self._get(
            "getting areas",
            "areas",
            params,
            auth_headers(req.user_auth_token, req.service_auth_token),
            GetAreasResponse,
            log_data,
        )

    async def _get(
        self,
        action: str,
        path: str,
        params: dict[str, str],
        headers: dict[str, str],
        model: type[M],
        log_data: dict[str, Any],
    ) -> M:
        url = self._base_url.join(path).copy_merge_params(params)
        logger.info("dimension_api_request", action=action, url=str(url), **log_data)

        try:
            response = await self._http.get(url, headers=headers)
        except httpx.HTTPError as exc:
            raise RequestFailed(
                f"failed to get response from Dimensions API: {exc}",
                log_data=log_data,
            ) from exc

        try:
            check_get_response(response)
        except UpstreamError as exc:
            exc.log_data.update(log_data)
            raise

        try:
            return model.model_validate_json(response.content)
        except ValidationError as exc:
            raise DecodeFailed(
                f"unable to deserialize {path} response",
                body=truncate_body(response.content),
                reason=str(exc),
                log_data=log_data,
            ) from exc
