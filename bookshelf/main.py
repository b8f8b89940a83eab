# bookshelf/main.py
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse

from .catalog import catalog_router
from .catalog.commands import CatalogController
from .catalog.render import render_page
from .catalog.store import Catalog, CatalogLoadError
from .config import Config

logger = logging.getLogger(__name__)


def create_app(config: Optional[Config] = None) -> FastAPI:
    config = config or Config.from_env()
    logging.basicConfig(
        level=config.LOG_LEVEL,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    controller = CatalogController(
        Catalog(search_fields=config.SEARCH_FIELDS),
        cover_prefix=config.COVER_PREFIX,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        try:
            await controller.load(config.DATA_SOURCE, timeout=config.LOAD_TIMEOUT)
        except CatalogLoadError as exc:
            # Serve the error state instead of refusing to start.
            logger.error("Error initializing book catalog: %s", exc)
        yield

    app = FastAPI(
        title="Bookshelf catalog",
        description=(
            "Browse a fixed catalog of books: search, filter by language "
            "and year range, and sort by title, author, year or pages."
        ),
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.controller = controller
    app.include_router(catalog_router)

    @app.get("/health")
    def health_check(request: Request):
        ctrl: CatalogController = request.app.state.controller
        return ctrl.health()

    @app.get("/", response_class=HTMLResponse)
    def catalog_page(request: Request):
        ctrl: CatalogController = request.app.state.controller
        return ctrl.render(
            lambda catalog: render_page(catalog, ctrl.cover_prefix, ctrl.load_error)
        )

    return app


app = create_app()
