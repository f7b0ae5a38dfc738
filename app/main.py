# app/main.py
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.middleware.sessions import SessionMiddleware

from app.api import chat
from app.services.chat_model import ChatModelFactory, OpenAIModelFactory
from app.services.history_manager import MemoryRegistry
from app.settings import Settings, get_settings
from app.utils.exceptions import ServiceUnavailableError

logger = logging.getLogger(__name__)


async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Malformed bodies are client errors shaped like every other 400."""
    if any("prompt" in err.get("loc", ()) for err in exc.errors()):
        message = "Prompt is required"
    else:
        message = "Invalid request body"
    logger.debug("Rejected request to %s: %s", request.url.path, exc.errors())
    return JSONResponse(status_code=400, content={"error": message})


async def unavailable_error_handler(request: Request, exc: ServiceUnavailableError):
    logger.warning("Request to %s before startup finished: %s", request.url.path, exc)
    return JSONResponse(status_code=503, content={"error": str(exc)})


def create_app(
    settings: Optional[Settings] = None,
    model_factory: Optional[ChatModelFactory] = None,
    registry: Optional[MemoryRegistry] = None,
) -> FastAPI:
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = registry is None
        app.state.memory_registry = registry or MemoryRegistry(settings.memory_db_path)
        app.state.settings = settings
        app.state.model_factory = model_factory or OpenAIModelFactory(settings)
        logger.info(
            "Chat service ready (default model %s, memory %s)",
            settings.default_model,
            settings.memory_db_path or "in-process",
        )

        yield

        if owned:
            app.state.memory_registry.close()
        app.state.memory_registry = None

    app = FastAPI(
        title="Chat Relay",
        version="0.1.0",
        debug=settings.debug,
        lifespan=lifespan,
    )

    # max_age=None: cookie lives for the browser session
    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.session_secret,
        session_cookie=settings.session_cookie,
        max_age=None,
    )
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(ServiceUnavailableError, unavailable_error_handler)

    app.include_router(chat.router, prefix="/chat", tags=["OpenAI"])

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    return app


_settings = get_settings()
logging.basicConfig(
    level=getattr(logging, _settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

app = create_app(_settings)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
