from __future__ import annotations

from enum import Enum

import httpx
from fastapi import HTTPException

UNAVAILABLE_DETAIL = "Could not connect to local Ollama instance. Is it running?"


class RunnerError(HTTPException):
    def __init__(self, status_code: int, error: str, detail: str):
        super().__init__(
            status_code=status_code, detail={"error": error, "detail": detail}
        )


class UpstreamStatusError(Exception):
    """Ollama answered, but with a non-2xx status."""

    def __init__(self, status_code: int, body: str):
        super().__init__(f"Ollama returned HTTP {status_code}")
        self.status_code = status_code
        self.body = body


class FailureKind(str, Enum):
    UNREACHABLE = "unreachable"
    UPSTREAM_ERROR = "upstream_error"
    INTERNAL = "internal"


def classify_failure(exc: BaseException) -> FailureKind:
    if isinstance(exc, UpstreamStatusError):
        return FailureKind.UPSTREAM_ERROR
    # ConnectError covers refused connections and unresolvable hosts; timeouts
    # while connecting are a separate class and stay internal.
    if isinstance(exc, (httpx.ConnectError, ConnectionRefusedError)):
        return FailureKind.UNREACHABLE
    return FailureKind.INTERNAL


def err_inference_failed(body: str) -> RunnerError:
    return RunnerError(502, "Ollama inference failed", body)


def err_engine_unavailable() -> RunnerError:
    return RunnerError(503, "AI Engine Unavailable", UNAVAILABLE_DETAIL)


def err_internal(message: str) -> RunnerError:
    return RunnerError(500, "Internal runner error", message)


def error_for_failure(exc: BaseException) -> RunnerError:
    kind = classify_failure(exc)
    if kind is FailureKind.UPSTREAM_ERROR:
        return err_inference_failed(exc.body)  # type: ignore[attr-defined]
    if kind is FailureKind.UNREACHABLE:
        return err_engine_unavailable()
    return err_internal(str(exc) or type(exc).__name__)
