# backend/main.py
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from dotenv import load_dotenv

load_dotenv()

from config import settings
from database import Database
from services.errors import DomainError

# Routers
from routes.auth import router as auth_router
from routes.users import router as users_router
from routes.categories import router as categories_router
from routes.brands import router as brands_router
from routes.products import router as products_router
from routes.orders import router as orders_router
from routes.settings import router as settings_router
from routes.upload import router as upload_router
from routes.logs import router as logs_router

logger = logging.getLogger(__name__)


def create_app(database_url: Optional[str] = None, create_tables: bool = True) -> FastAPI:
    logging.basicConfig(level=settings.LOG_LEVEL)

    # Storage handle lives for the whole process: opened on startup, disposed on shutdown
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        db = Database(database_url)
        if create_tables:
            db.init_db()
        app.state.db = db
        logger.info("Database ready: %s", db.engine.url.render_as_string(hide_password=True))
        try:
            yield
        finally:
            db.dispose()

    app = FastAPI(title="Delivery Store API", version="1.0.0", lifespan=lifespan)

    # Local uploads (used when Cloudinary is not configured)
    Path(settings.UPLOAD_DIR).mkdir(parents=True, exist_ok=True)
    app.mount("/uploads", StaticFiles(directory=settings.UPLOAD_DIR), name="uploads")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Malformed bodies are reported as 400, not FastAPI's default 422
    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"detail": jsonable_encoder(exc.errors())})

    @app.exception_handler(DomainError)
    async def domain_exception_handler(request: Request, exc: DomainError):
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})

    # API routers
    app.include_router(auth_router)
    app.include_router(users_router)
    app.include_router(categories_router)
    app.include_router(brands_router)
    app.include_router(products_router)
    app.include_router(orders_router)
    app.include_router(settings_router)
    app.include_router(upload_router)
    app.include_router(logs_router)

    @app.get("/")
    def read_root():
        return {"message": "Delivery Store API is running"}

    return app


app = create_app()
