"""Cantabular GraphQL and codebook client."""

from __future__ import annotations

from dp_clients.cantabular.client import CantabularClient
from dp_clients.cantabular.executor import GraphQLExecutor, HTTPGraphQLExecutor
from dp_clients.cantabular.queries import Filter, QueryData
