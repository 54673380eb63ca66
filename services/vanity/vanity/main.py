import asyncio, logging, signal
from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse, PlainTextResponse
from .core.errors import RenderError
from .core.http import Http
from .core.render import render_page
from .core.settings import Settings
from .core.store import ConfigStore
from .watchers.refresh import Reloader, register_reload_signal, reload_safely, run_interval, run_signals

logger = logging.getLogger(__name__)

METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]

async def startup(app: FastAPI):
    state = app.state
    state.owns_http = state.http is None
    if state.owns_http:
        state.http = Http()
    if state.reload_requests is None:
        state.reload_requests = asyncio.Queue()
    state.reloader = Reloader(state.settings.config, state.store, state.http)
    # first load happens before any request is served; failure leaves the store empty
    await reload_safely(state.reloader)
    state.signal_loop = asyncio.get_running_loop()
    state.signal_registered = register_reload_signal(state.signal_loop, state.reload_requests)
    state.tasks = [
        asyncio.create_task(run_interval(state.reloader, state.settings.interval)),
        asyncio.create_task(run_signals(state.reloader, state.reload_requests)),
    ]

async def shutdown(app: FastAPI):
    state = app.state
    for task in state.tasks:
        task.cancel()
    await asyncio.gather(*state.tasks, return_exceptions=True)
    state.tasks = []
    if state.signal_registered:
        state.signal_loop.remove_signal_handler(signal.SIGHUP)
        state.signal_registered = False
    if state.owns_http:
        await state.http.close()
        state.http = None
        state.owns_http = False

@asynccontextmanager
async def lifespan(app: FastAPI):
    await startup(app)
    try:
        yield
    finally:
        await shutdown(app)

def create_app(settings: Settings, store: Optional[ConfigStore]=None,
               reload_requests: Optional[asyncio.Queue]=None, http: Optional[Http]=None) -> FastAPI:
    app = FastAPI(title="vanity", docs_url=None, redoc_url=None, openapi_url=None, lifespan=lifespan)
    app.state.settings = settings
    app.state.store = store if store is not None else ConfigStore()
    app.state.reload_requests = reload_requests
    app.state.http = http
    app.state.tasks = []
    app.state.signal_registered = False
    app.state.owns_http = False

    @app.api_route("/{path:path}", methods=METHODS)
    async def vanity(request: Request):
        current = request.url.path
        logger.info("%s %s", request.method, current)

        entry = app.state.store.lookup(current)
        if entry is None:
            logger.info("%s 404 %s", request.method, current)
            return PlainTextResponse("404 page not found", status_code=404)

        try:
            body = render_page(settings.host + current, entry.repo, entry.display)
        except RenderError:
            logger.exception("%s 500 %s", request.method, current)
            return PlainTextResponse("cannot render the page", status_code=500)

        logger.info("%s 200 %s", request.method, current)
        return HTMLResponse(body)

    return app
