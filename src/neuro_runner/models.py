from __future__ import annotations

from typing import Any, List, Optional

from pydantic import BaseModel, Field, field_validator


class ChatRequest(BaseModel):
    # content is forwarded untouched, even when missing or not a string
    content: Any = None
    model: Optional[str] = None


class OllamaMessage(BaseModel):
    role: str = "user"
    content: Any = None


class OllamaChatRequest(BaseModel):
    model: str
    messages: List[OllamaMessage]
    stream: bool = False


class OllamaResponseMessage(BaseModel):
    role: Any = None
    content: Any = None


class OllamaChatResponse(BaseModel):
    """Subset of Ollama's ``/api/chat`` reply; every field may be missing.

    Values are passed through as received; only ``message`` is reduced to
    ``None`` when it is not an object.
    """

    message: Optional[OllamaResponseMessage] = None
    model: Any = None
    eval_duration: Any = None
    prompt_eval_count: Any = None
    total_duration: Any = None

    @field_validator("message", mode="before")
    @classmethod
    def _drop_non_object_message(cls, value: Any) -> Any:
        return value if isinstance(value, dict) else None

    @classmethod
    def from_body(cls, body: Any) -> "OllamaChatResponse":
        return cls.model_validate(body if isinstance(body, dict) else {})


class ChatMetrics(BaseModel):
    eval_duration: Any = None
    prompt_eval_count: Any = None


class ChatReply(BaseModel):
    sender: str = "ai"
    content: Any
    model: Any = None
    timestamp: int
    metrics: ChatMetrics = Field(default_factory=ChatMetrics)
