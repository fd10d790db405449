from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI
from trade_indexer.api import api
from trade_indexer.runtime import Runtime, build_runtime
import logging
from trade_indexer.utils.shortname import ShortNameFilter


def configure_logging(level: int = logging.INFO) -> None:
    logging.basicConfig(
        level=level,
        format="[%(asctime)s] [%(levelname)s] %(shortname)s: %(message)s",
    )
    for handler in logging.getLogger().handlers:
        handler.addFilter(ShortNameFilter())


configure_logging()
log = logging.getLogger(__name__)


def create_app(mode: str = "index", runtime: Optional[Runtime] = None) -> FastAPI:
    """FastAPI app whose lifespan owns the indexer runtime.

    Startup builds (or adopts) the runtime and starts its background loops;
    shutdown stops them, which flushes the scanner before sockets close.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        rt = runtime if runtime is not None else await build_runtime(mode)
        app.state.runtime = rt
        await rt.start()
        log.info(f"✅ Runtime started in {mode} mode")
        try:
            yield
        finally:
            await rt.stop()

    app = FastAPI(title="trade-indexer", lifespan=lifespan)
    app.include_router(api.router, prefix="/api")
    return app


app = create_app()
