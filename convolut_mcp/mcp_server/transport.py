"""HTTP transport for the Convolut API."""

import json
import logging
from typing import Any

import httpx

from convolut_mcp.mcp_server.config import Config
from convolut_mcp.mcp_server.errors import (
    ApiError,
    ConnectionFailed,
    InvalidResponse,
    MalformedRedirect,
    RequestTimeout,
    TooManyRedirects,
    TransportError,
)

logger = logging.getLogger(__name__)

REDIRECT_STATUSES = frozenset({301, 302, 307})


class HttpTransport:
    """Issues one JSON request against the API, following redirects by hand.

    On 301/302/307 the original method and body are re-sent to the Location
    target, at most ``config.max_redirects`` times. The API key is dropped on
    hops that leave the base URL's origin.
    """

    def __init__(
        self,
        config: Config,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the transport.

        Args:
            config: Server configuration (base URL, key, timeouts)
            transport: Optional httpx transport, used by tests to stub the network
        """
        self.config = config
        self.base_url = config.base_url
        self._origin = httpx.URL(config.base_url)
        self._transport = transport

    def _same_origin(self, url: httpx.URL) -> bool:
        return (url.scheme, url.host, url.port) == (
            self._origin.scheme,
            self._origin.host,
            self._origin.port,
        )

    def _headers(self, url: httpx.URL, authenticated: bool) -> dict[str, str]:
        """Request headers; the API key only goes to the API's own origin."""
        headers = {
            "Content-Type": "application/json",
            "User-Agent": self.config.user_agent,
        }
        if authenticated and self._same_origin(url):
            headers[self.config.api_key_header] = (
                self.config.api_key.get_secret_value()
            )
        return headers

    def _resolve(self, target: str) -> httpx.URL:
        if target.startswith(("http://", "https://")):
            return httpx.URL(target)
        return httpx.URL(f"{self.base_url}{target}")

    async def request(
        self,
        method: str,
        target: str,
        *,
        body: Any = None,
        timeout: float | None = None,
        authenticated: bool = True,
    ) -> Any:
        """Perform a request and return the parsed JSON body.

        Args:
            method: HTTP method
            target: Path relative to the API base URL, or an absolute URL
            body: JSON-serializable request body, sent unchanged on every hop
            timeout: Per-call timeout in seconds (defaults to request_timeout)
            authenticated: Whether to attach the API key header

        Returns:
            Parsed JSON body, or None for an empty 2xx response

        Raises:
            TransportError: On timeout, connection failure, bad redirect,
                non-2xx status or unparseable body
        """
        url = self._resolve(target)
        content = json.dumps(body) if body is not None else None
        timeout = timeout if timeout is not None else self.config.request_timeout

        try:
            async with httpx.AsyncClient(
                timeout=timeout,
                follow_redirects=False,
                transport=self._transport,
            ) as client:
                redirects = 0
                while True:
                    logger.debug(f"{method} {url.path}")
                    response = await client.request(
                        method,
                        url,
                        content=content,
                        headers=self._headers(url, authenticated),
                    )

                    if response.status_code not in REDIRECT_STATUSES:
                        return self._handle_response(response)

                    location = response.headers.get("Location")
                    if not location:
                        raise MalformedRedirect(
                            f"Redirect {response.status_code} without Location header",
                            status_code=response.status_code,
                        )
                    if redirects >= self.config.max_redirects:
                        raise TooManyRedirects(
                            f"Too many redirects (limit {self.config.max_redirects})",
                            status_code=response.status_code,
                        )
                    redirects += 1
                    url = response.url.join(location)
                    logger.debug(
                        f"Following {response.status_code} redirect "
                        f"{redirects}/{self.config.max_redirects}"
                    )

        except TransportError:
            raise
        except httpx.TimeoutException:
            raise RequestTimeout(
                f"Request timeout after {timeout:g}s: {method} {target}"
            )
        except httpx.ConnectError:
            raise ConnectionFailed(f"Cannot connect to Convolut API at {url.host}")
        except httpx.HTTPError as e:
            raise TransportError(f"Request failed: {e}")

    def _handle_response(self, response: httpx.Response) -> Any:
        """Turn a final (non-redirect) response into JSON or an error."""
        text = response.text
        if not 200 <= response.status_code < 300:
            raise ApiError(response.status_code, text)

        if response.status_code == 204 or not text.strip():
            return None

        try:
            return json.loads(text)
        except json.JSONDecodeError:
            raise InvalidResponse(text)


__all__ = ["HttpTransport", "REDIRECT_STATUSES"]
