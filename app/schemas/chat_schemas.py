# app/schemas/chat_schemas.py

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.settings import DEFAULT_MODEL, DEFAULT_SYSTEM_PROMPT


class PromptRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    prompt: str = Field(..., description="The user prompt to send to the AI model.")
    system_prompt: Optional[str] = Field(
        None,
        alias="systemPrompt",
        description=f"The system prompt to send to the AI model. Defaults to {DEFAULT_SYSTEM_PROMPT!r}.",
    )
    model: Optional[str] = Field(
        None,
        description=f"The OpenAI model to use (e.g., gpt-3.5-turbo, gpt-4). Defaults to {DEFAULT_MODEL!r}.",
    )

    @field_validator("prompt", "system_prompt", "model", mode="before")
    @classmethod
    def _coerce_scalars(cls, value):
        # numbers and booleans are read as text, null as an empty string
        if value is None:
            return ""
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, (int, float)):
            return str(value)
        return value


class ChatReply(BaseModel):
    role: Literal["assistant"] = "assistant"
    content: str = Field(..., examples=["This is a response from the AI."])


class ErrorResponse(BaseModel):
    error: str


class UpstreamErrorResponse(ErrorResponse):
    details: str
