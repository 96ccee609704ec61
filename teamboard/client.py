import asyncio
from typing import Any
from urllib.parse import quote

import structlog
from curl_cffi.requests import AsyncSession, RequestsError

from teamboard.exceptions import AuthError, ParseError, TransientTransportError

logger = structlog.get_logger(__name__)

AUTH_FAILURE_STATUSES = frozenset({401, 403})
DIRECT = ""


def wrap_relay(relay_prefix: str, url: str) -> str:
    """Builds the relay passthrough URL for a target URL.

    The empty prefix stands for a direct request and returns the URL as is.
    """
    if not relay_prefix:
        return url
    return f"{relay_prefix}{quote(url, safe='')}"


class ApiClient:
    """Issues single GET requests against the quiz API or a relay.

    One request, one outcome: the client never retries on its own. Failures are
    classified into ``AuthError`` (401/403), ``ParseError`` (2xx without JSON)
    and ``TransientTransportError`` (everything else) so that the fallback
    sequencer can decide what to try next.
    """

    def __init__(
        self,
        timeout: float = 10.0,
        impersonate: str = "chrome",
        session: AsyncSession | None = None,
    ):
        """Initialize the client.

        :param timeout: Seconds before a request counts as a transient failure.
        :param impersonate: Browser fingerprint for curl_cffi.
        :param session: An optional shared AsyncSession.
        """
        self.timeout = timeout
        self.impersonate = impersonate
        self._session = session
        self._owns_session = session is None

    def _get_session(self) -> AsyncSession:
        if self._session is None:
            self._session = AsyncSession(impersonate=self.impersonate)
        return self._session

    async def get_json(self, url: str, headers: dict[str, str]) -> Any:
        """Perform a GET request and decode its JSON body.

        :param url: Fully built request URL (already relay-wrapped if needed).
        :param headers: Request headers, including Authorization.
        :return: The decoded JSON document.
        :raises AuthError: On HTTP 401/403.
        :raises ParseError: On a 2xx body that is not JSON.
        :raises TransientTransportError: On timeout, network error or other status.
        """
        session = self._get_session()
        try:
            response = await asyncio.wait_for(
                session.get(url, headers=headers, timeout=self.timeout),
                timeout=self.timeout,
            )
        except TimeoutError as e:
            raise TransientTransportError(
                f"Request timed out after {self.timeout}s", url=url
            ) from e
        except (RequestsError, OSError) as e:
            raise TransientTransportError(f"Request failed: {e}", url=url) from e

        status = response.status_code
        if status in AUTH_FAILURE_STATUSES:
            raise AuthError(f"Status: {status}", url=url, status_code=status)
        if not 200 <= status < 300:
            raise TransientTransportError(
                f"Status: {status}", url=url, status_code=status
            )

        try:
            return response.json()
        except ValueError as e:
            raise ParseError(
                f"Response body is not JSON: {e}", url=url, snippet=response.text
            ) from e

    async def aclose(self) -> None:
        if self._session is not None and self._owns_session:
            await self._session.close()
            self._session = None

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
