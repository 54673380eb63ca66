from urllib.parse import urlparse
import aiofiles
from .errors import ReadError
from .http import Http

REMOTE_SCHEMES = ("http", "https")

def is_remote(locator: str) -> bool:
    return urlparse(locator).scheme.lower() in REMOTE_SCHEMES

async def read_disk(path: str) -> bytes:
    try:
        async with aiofiles.open(path, "rb") as f:
            return await f.read()
    except (OSError, ValueError) as e:
        raise ReadError(f"cannot read {path}: {e}") from e

async def read_source(locator: str, http: Http) -> bytes:
    if is_remote(locator):
        return await http.fetch(locator)
    return await read_disk(locator)
