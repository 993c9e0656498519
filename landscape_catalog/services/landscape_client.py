"""
HTTP transport for the landscape data document.
"""
from __future__ import annotations

import logging
from typing import Optional

import httpx

logger = logging.getLogger(__name__)

LANDSCAPE_DATA_URL = "https://landscape.cncf.io/data/full.json"


class LandscapeClient:
    """
    Fetches the full landscape document as text.

    Any transport failure (connection, timeout, non-2xx) is raised as the
    corresponding ``httpx`` exception for the refresh controller to record.
    """

    def __init__(
        self,
        source_url: str = LANDSCAPE_DATA_URL,
        timeout: float = 30.0,
        user_agent: Optional[str] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.source_url = source_url
        self.timeout = timeout
        self.user_agent = user_agent
        # Injected in tests (httpx.MockTransport); None means real network.
        self._transport = transport

    def fetch_document(self) -> str:
        headers = {"Accept": "application/json"}
        if self.user_agent:
            headers["User-Agent"] = self.user_agent

        logger.debug(f"Downloading landscape document from {self.source_url}")
        with httpx.Client(
            follow_redirects=True,
            timeout=self.timeout,
            headers=headers,
            transport=self._transport,
        ) as client:
            response = client.get(self.source_url)
            response.raise_for_status()
            logger.debug(f"Downloaded {len(response.content)} bytes of landscape data")
            return response.text
