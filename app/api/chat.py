# app/api/chat.py
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from app.api.dependencies import (
    get_app_settings,
    get_memory_registry,
    get_model_factory,
)
from app.schemas.chat_schemas import (
    ChatReply,
    ErrorResponse,
    PromptRequest,
    UpstreamErrorResponse,
)
from app.services.chat_model import ChatModelFactory
from app.services.chat_service import process_prompt
from app.services.history_manager import MemoryRegistry
from app.settings import Settings
from app.utils.exceptions import InvalidPromptError, UpstreamError

router = APIRouter()

UPSTREAM_ERROR = "Failed to communicate with OpenAI"


@router.post(
    "",
    response_model=ChatReply,
    summary="Chat with OpenAI model",
    description="Send a prompt to the OpenAI chat model and get a completion.",
    responses={
        400: {"model": ErrorResponse, "description": "Bad Request - Prompt is required"},
        500: {"model": UpstreamErrorResponse, "description": "Internal Server Error"},
        503: {"model": ErrorResponse, "description": "Service Unavailable"},
    },
)
async def chat_endpoint(
    payload: PromptRequest,
    request: Request,
    registry: MemoryRegistry = Depends(get_memory_registry),
    model_factory: ChatModelFactory = Depends(get_model_factory),
    settings: Settings = Depends(get_app_settings),
):
    try:
        content = await process_prompt(
            request.session,
            registry,
            model_factory,
            prompt=payload.prompt,
            system_prompt=payload.system_prompt,
            model=payload.model,
            settings=settings,
        )
    except InvalidPromptError as e:
        return JSONResponse(status_code=400, content={"error": str(e)})
    except UpstreamError as e:
        return JSONResponse(
            status_code=500,
            content={"error": UPSTREAM_ERROR, "details": e.details},
        )

    return ChatReply(content=content)
