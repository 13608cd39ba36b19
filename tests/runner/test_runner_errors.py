import httpx

from neuro_runner.errors import (
    FailureKind,
    UpstreamStatusError,
    classify_failure,
    error_for_failure,
)


def test_classify_failure_closed_set():
    assert classify_failure(UpstreamStatusError(500, "boom")) is FailureKind.UPSTREAM_ERROR
    assert classify_failure(httpx.ConnectError("refused")) is FailureKind.UNREACHABLE
    assert classify_failure(ConnectionRefusedError()) is FailureKind.UNREACHABLE
    assert classify_failure(httpx.ConnectTimeout("slow")) is FailureKind.INTERNAL
    assert classify_failure(ValueError("bad json")) is FailureKind.INTERNAL


def test_error_for_failure_bodies():
    err = error_for_failure(UpstreamStatusError(500, "model crashed"))
    assert err.status_code == 502
    assert err.detail == {"error": "Ollama inference failed", "detail": "model crashed"}

    err = error_for_failure(httpx.ConnectError("refused"))
    assert err.status_code == 503
    assert err.detail["error"] == "AI Engine Unavailable"

    err = error_for_failure(KeyError())
    assert err.status_code == 500
    assert err.detail == {"error": "Internal runner error", "detail": "KeyError"}
