"""Shared test fixtures."""

from __future__ import annotations

import json
from typing import Any, Callable

import httpx
import pytest


@pytest.fixture(autouse=True)
def _env_setup(monkeypatch):
    """Point every client at fake hosts."""
    monkeypatch.setenv("CANTABULAR_URL", "http://cantabular.host")
    monkeypatch.setenv("CANTABULAR_EXT_API_URL", "http://cantabular.ext.host")
    monkeypatch.setenv("DIMENSIONS_API_URL", "http://dimensions.host")
    monkeypatch.setenv("ZEBEDEE_URL", "http://zebedee.host")
    monkeypatch.setenv("LOG_FORMAT", "console")


@pytest.fixture
def settings():
    from dp_clients.config import Settings

    return Settings()


@pytest.fixture
def json_response() -> Callable[..., httpx.Response]:
    def _build(payload: Any, status_code: int = 200) -> httpx.Response:
        return httpx.Response(
            status_code,
            content=json.dumps(payload).encode("utf-8"),
            headers={"Content-Type": "application/json"},
        )

    return _build


@pytest.fixture
def dataset_list_payload() -> dict:
    return {
        "data": {
            "datasets": {
                "edges": [
                    {"node": {"name": "dataset 1"}},
                    {"node": {"name": "dataset 2"}},
                ]
            }
        }
    }


@pytest.fixture
def dimensions_payload() -> dict:
    """Answer to the dimensions query: one derived and one base variable."""
    return {
        "data": {
            "dataset": {
                "variables": {
                    "edges": [
                        {
                            "node": {
                                "name": "ltla",
                                "label": "Lower Tier Local Authority",
                                "mapFrom": [
                                    {
                                        "edges": [
                                            {
                                                "node": {
                                                    "filterOnly": "false",
                                                    "label": "Output Area",
                                                    "name": "oa",
                                                }
                                            }
                                        ]
                                    }
                                ],
                                "categories": {"totalCount": 309},
                            }
                        },
                        {
                            "node": {
                                "name": "sex",
                                "label": "Sex",
                                "mapFrom": [],
                                "categories": {"totalCount": 2},
                            }
                        },
                    ]
                }
            }
        }
    }
