"""
Remote Submit Collaborator

Sends non-database ``submit`` actions to their endpoint over HTTP.
The dispatcher only depends on RemoteSubmitter; HttpSubmitter is the
default implementation.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any

import httpx

from uiruntime.config import Settings, get_settings
from uiruntime.core.exceptions import SubmissionError

logger = logging.getLogger(__name__)


class RemoteSubmitter(ABC):
    """Capability for delivering form payloads to an endpoint."""

    @abstractmethod
    async def submit(
        self,
        endpoint: str,
        payload: Mapping[str, Any],
        *,
        method: str = "POST",
        headers: Mapping[str, str] | None = None,
    ) -> Any:
        """
        Deliver ``payload``.

        Returns:
            The decoded response body

        Raises:
            SubmissionError: If the endpoint could not be reached or rejected the payload
        """


class HttpSubmitter(RemoteSubmitter):
    """
    HTTP client for remote submits.

    A client is opened per request; submissions are rare and short-lived.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Initialize submitter.

        Args:
            settings: Optional settings override (timeout)
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self.settings = settings or get_settings()
        self._transport = transport

    async def submit(
        self,
        endpoint: str,
        payload: Mapping[str, Any],
        *,
        method: str = "POST",
        headers: Mapping[str, str] | None = None,
    ) -> Any:
        method = method.upper()
        logger.info(f"Submitting {len(payload)} field(s) to {method} {endpoint}")

        try:
            async with httpx.AsyncClient(
                timeout=self.settings.submit_timeout_seconds,
                transport=self._transport,
            ) as client:
                if method in ("GET", "DELETE"):
                    response = await client.request(
                        method, endpoint, params=dict(payload), headers=dict(headers or {})
                    )
                else:
                    response = await client.request(
                        method, endpoint, json=dict(payload), headers=dict(headers or {})
                    )
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            raise SubmissionError(endpoint, f"HTTP {status}", status_code=status) from e
        except httpx.HTTPError as e:
            raise SubmissionError(endpoint, str(e) or type(e).__name__) from e

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text
