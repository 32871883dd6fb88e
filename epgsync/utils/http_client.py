"""
HTTP transport utilities

This module performs provider POST requests over a pooled httpx client with
optional retry logic. All failures surface as TransportError.
"""
import asyncio
import logging

import httpx

from epgsync.errors import TransportError


logger = logging.getLogger(__name__)

HEADER_USER_AGENT = "User-Agent"
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
)


class HTTPTransport:
    """
    POST-with-headers primitive bound to one provider's base URL.

    Retries on transient network errors (timeouts, connection errors) and 5xx
    responses when max_attempts > 1. Never retries 4xx responses.
    """

    def __init__(
        self,
        provider_id: str,
        base_url: str,
        *,
        timeout: float = 15.0,
        max_attempts: int = 1,
        backoff_factor: float = 2.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.provider_id = provider_id
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_attempts = max(1, max_attempts)
        self.backoff_factor = backoff_factor
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(base_url=self.base_url, timeout=timeout)

    async def __aenter__(self) -> "HTTPTransport":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    def _url(self, path: str) -> str:
        if path.startswith(("http://", "https://")):
            return path
        return f"{self.base_url}/{path.lstrip('/')}"

    async def post_with_headers(self, path: str, body: bytes, headers: dict[str, str]) -> bytes:
        """
        POST a raw body and return the raw response bytes

        Args:
            path: Request path relative to the base URL
            body: Encoded request body
            headers: Request headers

        Returns:
            Response body bytes

        Raises:
            TransportError: If the request fails after all attempts
        """
        url = self._url(path)
        last_error: TransportError | None = None

        for attempt in range(self.max_attempts):
            try:
                response = await self._client.post(url, content=body, headers=headers, timeout=self.timeout)
                response.raise_for_status()
                logger.debug("POST %s -> %s (%s bytes)", url, response.status_code, len(response.content))
                return response.content

            except (httpx.TimeoutException, httpx.ConnectError) as e:
                last_error = TransportError(self.provider_id, f"POST {url} failed: {type(e).__name__}: {e}")
                last_error.__cause__ = e

            except httpx.HTTPStatusError as e:
                status = e.response.status_code
                error = TransportError(self.provider_id, f"POST {url} returned HTTP {status}", status_code=status)
                if 400 <= status < 500:
                    logger.error("HTTP %s (client error) from %s", status, url)
                    raise error from e
                last_error = error
                last_error.__cause__ = e

            except httpx.HTTPError as e:
                raise TransportError(self.provider_id, f"POST {url} failed: {type(e).__name__}: {e}") from e

            if attempt < self.max_attempts - 1:
                wait_time = self.backoff_factor ** attempt
                logger.warning(
                    "POST attempt %s/%s to %s failed (%s). Retrying in %.1fs...",
                    attempt + 1,
                    self.max_attempts,
                    url,
                    last_error,
                    wait_time,
                )
                await asyncio.sleep(wait_time)

        logger.error("POST %s failed after %s attempt(s)", url, self.max_attempts)
        raise last_error
