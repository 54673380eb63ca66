import asyncio, logging, signal
from ..core.config import parse_config
from ..core.errors import ConfigError
from ..core.http import Http
from ..core.source import read_source
from ..core.store import ConfigStore

logger = logging.getLogger(__name__)

TAG = "[REFRESH]"

class Reloader:
    def __init__(self, locator: str, store: ConfigStore, http: Http):
        self.locator = locator
        self.store = store
        self.http = http

    async def reload(self) -> bool:
        """Fetch, parse and install a new mapping. On failure the current one stays."""
        logger.info("%s refresh config from %s...", TAG, self.locator)
        try:
            raw = await read_source(self.locator, self.http)
            mapping = parse_config(raw)
        except ConfigError as e:
            logger.error("%s refresh failed, keeping generation %d: %s", TAG, self.store.generation, e)
            return False
        generation = self.store.replace(mapping)
        logger.info("%s loaded %d entries (generation %d)", TAG, len(mapping), generation)
        return True

async def reload_safely(reloader: Reloader) -> bool:
    try:
        return await reloader.reload()
    except Exception:
        # keep running; a broken reload must not stop later ones
        logger.exception("%s refresh crashed, keeping generation %d", TAG, reloader.store.generation)
        return False

async def run_interval(reloader: Reloader, interval: float):
    while True:
        await asyncio.sleep(interval)
        await reload_safely(reloader)

async def run_signals(reloader: Reloader, requests: asyncio.Queue):
    while True:
        signum = await requests.get()
        try:
            name = signal.Signals(signum).name
        except ValueError:
            name = str(signum)
        logger.info("%s get signal: %s", TAG, name)
        try:
            await reload_safely(reloader)
        finally:
            requests.task_done()

def register_reload_signal(loop: asyncio.AbstractEventLoop, requests: asyncio.Queue,
                           signum: int | None=None) -> bool:
    """Enqueue one reload request per delivered signal.

    Returns False when this loop cannot take signal handlers (not the main
    thread, or no Unix signals); the interval refresh still runs then.
    """
    signum = signum if signum is not None else getattr(signal, "SIGHUP", None)
    if signum is None:
        logger.warning("%s reload signal unavailable: no SIGHUP on this platform", TAG)
        return False
    try:
        loop.add_signal_handler(signum, requests.put_nowait, signum)
    except (NotImplementedError, RuntimeError, ValueError) as e:
        logger.warning("%s reload signal unavailable: %s", TAG, e)
        return False
    return True
