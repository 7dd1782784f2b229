"""Cantabular dimension API client."""

from __future__ import annotations

from dp_clients.dimension.client import DimensionClient
from dp_clients.dimension.models import GetAreasInput
