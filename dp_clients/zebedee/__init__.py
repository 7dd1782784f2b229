"""Zebedee content-store client."""

from __future__ import annotations

from dp_clients.zebedee.client import ZebedeeClient
