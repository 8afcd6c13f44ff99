"""
Gallery CMS - application factory and entry point.
Serves the public gallery, the admin panel, uploaded images and the JSON API.
"""
import logging
from typing import Optional

import uvicorn
from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import __version__
from .api import router as api_router
from .articles import ArticleStore
from .audit_api import router as audit_router
from .config import Settings
from .database import make_engine, make_session_factory
from .images import ImageStore, URL_PREFIX
from .storage import make_backend

logger = logging.getLogger(__name__)


def _error_response(status_code: int, detail, headers=None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": detail}, headers=headers)


def create_app(settings: Optional[Settings] = None, article_backend=None) -> FastAPI:
    settings = settings or Settings.from_env()
    logging.basicConfig(level=settings.log_level)

    for directory in (settings.public_dir, settings.admin_dir, settings.upload_dir, settings.data_dir):
        directory.mkdir(parents=True, exist_ok=True)

    backend = article_backend or make_backend(settings)
    backend.ensure()
    image_store = ImageStore(settings.upload_dir)
    image_store.ensure()

    app = FastAPI(title="Gallery CMS", version=__version__)
    app.state.settings = settings
    app.state.article_store = ArticleStore(backend)
    app.state.image_store = image_store
    app.state.session_factory = make_session_factory(make_engine(settings.database_url))

    # ============== ERROR HANDLERS ==============

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        return _error_response(exc.status_code, exc.detail, getattr(exc, "headers", None))

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        return _error_response(400, "Invalid request")

    # ============== ROUTES ==============

    app.include_router(api_router)
    app.include_router(audit_router)

    @app.get("/health")
    def health_check():
        return {"status": "alive"}

    def _page(path):
        if not path.is_file():
            raise HTTPException(status_code=404, detail="Not found")
        return FileResponse(path)

    @app.get("/", include_in_schema=False)
    def landing_page():
        return _page(settings.public_dir / "index.html")

    @app.get("/admin", include_in_schema=False)
    def admin_page():
        return _page(settings.admin_dir / "index.html")

    # Mounts match in registration order; the public root catches everything left
    app.mount(URL_PREFIX, StaticFiles(directory=settings.upload_dir), name="images")
    app.mount("/admin", StaticFiles(directory=settings.admin_dir, html=True), name="admin")
    app.mount("/", StaticFiles(directory=settings.public_dir), name="public")

    return app


def run():
    settings = Settings.from_env()
    app = create_app(settings)
    logger.info(f"Server running at http://localhost:{settings.port}")
    logger.info(f"Admin panel at http://localhost:{settings.port}/admin/")
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    run()
