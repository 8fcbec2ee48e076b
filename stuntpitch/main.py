"""Application entrypoint: sets up FastAPI app, CORS, logging and registers API routers.

The chat pipeline configuration, LLM client and embedder live on `app.state`, so the
admin endpoint can swap the configuration and tests can swap the collaborators.
"""
import logging
import sys
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from stuntpitch.api.routers import admin as admin_router
from stuntpitch.api.routers import chat as chat_router
from stuntpitch.api.routers import health as health_router
from stuntpitch.api.routers import profiles as profiles_router
from stuntpitch.api.routers import projects as projects_router
from stuntpitch.api.routers import search as search_router
from stuntpitch.core.config import settings
from stuntpitch.services.casting.pipeline import PipelineConfig
from stuntpitch.services.common.embedding_client import default_embedding_client
from stuntpitch.services.common.llm_client import default_llm_client


# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s | %(levelname)-8s | %(name)s | %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S',
    handlers=[
        logging.StreamHandler(sys.stdout)
    ]
)

logging.getLogger("casting.pipeline").setLevel(logging.INFO)
logging.getLogger("casting.query_parser").setLevel(logging.INFO)

# Reduce noise from external libraries
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)
logging.getLogger("openai").setLevel(logging.WARNING)
logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """HTTP errors (401, 403, 404, 409, ...) share the `{"error": ...}` body the chat route uses."""
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=getattr(exc, "headers", None))


def create_app() -> FastAPI:
    app = FastAPI(title=settings.APP_NAME, version="0.1.0")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(StarletteHTTPException, http_error_handler)

    app.state.pipeline_config = PipelineConfig.from_settings()
    app.state.llm = default_llm_client
    app.state.embedder = default_embedding_client

    app.include_router(health_router.router)
    app.include_router(chat_router.router)
    app.include_router(search_router.router)
    app.include_router(profiles_router.router)
    app.include_router(projects_router.router)
    app.include_router(admin_router.router)

    return app


app = create_app()
