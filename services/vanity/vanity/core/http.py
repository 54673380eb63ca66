import logging
from typing import Optional
import httpx
from .errors import FetchError, ReadError

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {"User-Agent": "vanity-config-fetcher/1.0"}
FETCH_TIMEOUT = 30.0

class Http:
    def __init__(self, transport: Optional[httpx.AsyncBaseTransport]=None, timeout: float=FETCH_TIMEOUT):
        self.client = httpx.AsyncClient(
            timeout=httpx.Timeout(timeout),
            follow_redirects=True,
            headers=DEFAULT_HEADERS,
            transport=transport,
        )

    async def fetch(self, url: str) -> bytes:
        """Single GET; the full body on 200, FetchError/ReadError otherwise. No retries."""
        try:
            request = self.client.build_request("GET", url)
        except (httpx.InvalidURL, ValueError) as e:
            raise FetchError(f"cannot build request for {url}: {e}") from e
        try:
            r = await self.client.send(request, stream=True)
        except httpx.HTTPError as e:
            logger.warning("error to request %s: %s", url, e)
            raise FetchError(f"request to {url} failed: {e}") from e
        try:
            if r.status_code != 200:
                raise FetchError(f"response status code {r.status_code} from {url}")
            try:
                return await r.aread()
            except (httpx.HTTPError, httpx.StreamError) as e:
                raise ReadError(f"error reading response from {url}: {e}") from e
        finally:
            await r.aclose()

    async def close(self):
        await self.client.aclose()
