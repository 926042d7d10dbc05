"""
flowgate.client

REST clients for the remote analysis engines (GenePattern, Galaxy).
"""

from __future__ import annotations

from typing import Any, Optional, Union

import httpx

from flowgate.client.base import APIError, BaseHTTPClient
from flowgate.client.galaxy import GalaxyClient
from flowgate.client.genepattern import GenePatternClient
from flowgate.models.domain import Platform

AnalysisClient = Union[GenePatternClient, GalaxyClient]


def client_for_server(server: Any, *, transport: Optional[httpx.BaseTransport] = None) -> AnalysisClient:
    """
    Build the client matching an AnalysisServer row.

    The stored password is decrypted here; it never leaves the client.
    """
    if server.platform == Platform.GALAXY:
        return GalaxyClient(server.url, server.user_name, server.password, transport=transport)
    if server.platform == Platform.GENEPATTERN:
        return GenePatternClient(server.url, server.user_name, server.password, transport=transport)
    raise ValueError(f"Unknown analysis platform {server.platform!r} for server {server.name}")


__all__ = [
    "APIError",
    "AnalysisClient",
    "BaseHTTPClient",
    "GalaxyClient",
    "GenePatternClient",
    "client_for_server",
]
