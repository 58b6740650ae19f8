"""
Remote identity lookup.

Fetches an identifier (for example the account id behind an API token)
from a JSON endpoint. The lookup is slow and its answer does not change
within a process, so the package state computes it once and memoizes it.
"""

from typing import Any, Dict, Optional

import httpx
import structlog
from opentelemetry import trace
from tenacity import (
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from ...core.config import Settings, get_settings
from ...exceptions import IdentityLookupException

logger = structlog.get_logger(__name__)
tracer = trace.get_tracer(__name__)


class RemoteIdentityClient:
    """
    HTTP client resolving the remote identifier.

    Transport errors are retried with exponential backoff; HTTP error
    statuses and malformed bodies fail immediately.
    """

    def __init__(
        self,
        url: Optional[str],
        field: str = "id",
        token: Optional[str] = None,
        timeout: float = 10.0,
        max_retries: int = 3,
        backoff_seconds: float = 0.5,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """
        Initialize identity client.

        Args:
            url: Endpoint returning a JSON object
            field: Name of the JSON field holding the identifier
            token: Optional bearer token
            timeout: Request timeout in seconds
            max_retries: Total attempts for transport errors
            backoff_seconds: Base delay of the exponential backoff
            transport: Custom httpx transport
        """
        self.url = url
        self.field = field
        self.token = token
        self.timeout = timeout
        self.max_retries = max_retries
        self.backoff_seconds = backoff_seconds
        self.transport = transport

    @classmethod
    def from_settings(
        cls,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> "RemoteIdentityClient":
        settings = settings or get_settings()
        return cls(
            url=settings.IDENTITY_URL,
            field=settings.IDENTITY_FIELD,
            token=settings.IDENTITY_TOKEN,
            timeout=settings.IDENTITY_TIMEOUT_SECONDS,
            max_retries=settings.IDENTITY_MAX_RETRIES,
            transport=transport,
        )

    def fetch_identifier(self) -> str:
        """
        Resolve the remote identifier.

        Returns:
            The identifier as a string

        Raises:
            IdentityLookupException: Not configured, unreachable, or bad response
        """
        if not self.url:
            raise IdentityLookupException(
                "Remote identity URL is not configured (set PKGSTATE_IDENTITY_URL)"
            )

        with tracer.start_as_current_span("identity.fetch") as span:
            span.set_attribute("http.url", self.url)

            try:
                response = self._request()
            except httpx.HTTPError as e:
                span.record_exception(e)
                span.set_status(trace.Status(trace.StatusCode.ERROR, str(e)))
                raise IdentityLookupException(
                    f"Identity request failed: {type(e).__name__}",
                    url=self.url,
                    original_error=e,
                ) from e

            span.set_attribute("http.status_code", response.status_code)
            identifier = self._extract(response)

        logger.info("Remote identifier resolved", url=self.url, field=self.field)
        return identifier

    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _request(self) -> httpx.Response:
        retrying = Retrying(
            stop=stop_after_attempt(self.max_retries),
            wait=wait_exponential(multiplier=self.backoff_seconds, max=10),
            retry=retry_if_exception_type(httpx.TransportError),
            reraise=True,
        )
        for attempt in retrying:
            with attempt:
                with httpx.Client(
                    timeout=self.timeout, transport=self.transport
                ) as client:
                    return client.get(self.url, headers=self._headers())

    def _extract(self, response: httpx.Response) -> str:
        if response.is_error:
            raise IdentityLookupException(
                f"Identity endpoint returned HTTP {response.status_code}",
                url=self.url,
                status_code=response.status_code,
            )

        try:
            payload: Any = response.json()
        except ValueError as e:
            raise IdentityLookupException(
                "Identity endpoint returned a non-JSON body",
                url=self.url,
                status_code=response.status_code,
                original_error=e,
            ) from e

        if not isinstance(payload, dict) or payload.get(self.field) is None:
            raise IdentityLookupException(
                f"Identity response has no '{self.field}' field",
                url=self.url,
                status_code=response.status_code,
            )

        return str(payload[self.field])
