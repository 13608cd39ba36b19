from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, Optional

import httpx

from .config import DEFAULT_MODEL, RunnerConfig
from .errors import (
    FailureKind,
    UpstreamStatusError,
    classify_failure,
    error_for_failure,
)
from .logging_utils import JsonlLogger
from .models import (
    ChatMetrics,
    ChatReply,
    ChatRequest,
    OllamaChatRequest,
    OllamaChatResponse,
    OllamaMessage,
)

logger = logging.getLogger(__name__)

NO_RESPONSE = "No response generated"


class WallClock:
    """Millisecond wall clock that never steps backwards within a process."""

    def __init__(self, source: Callable[[], float] = time.time):
        self._source = source
        self._last_ms = 0

    def now_ms(self) -> int:
        now = max(int(self._source() * 1000), self._last_ms)
        self._last_ms = now
        return now


class ChatForwarder:
    def __init__(
        self,
        cfg: RunnerConfig,
        request_log: JsonlLogger | None = None,
        clock: WallClock | None = None,
    ):
        self.cfg = cfg
        self.request_log = request_log
        self.clock = clock or WallClock()
        self.client = httpx.AsyncClient(timeout=cfg.backend_timeout_s)

    async def aclose(self) -> None:
        await self.client.aclose()

    @staticmethod
    def build_upstream_request(request: ChatRequest) -> OllamaChatRequest:
        return OllamaChatRequest(
            model=request.model or DEFAULT_MODEL,
            messages=[OllamaMessage(role="user", content=request.content)],
            stream=False,
        )

    def build_reply(self, data: OllamaChatResponse) -> ChatReply:
        content = data.message.content if data.message is not None else None
        if content is None:
            content = NO_RESPONSE
        # Fields Ollama left out stay out of the reply; explicit nulls are kept.
        present = data.model_fields_set
        metrics = ChatMetrics(
            **{
                key: getattr(data, key)
                for key in ("eval_duration", "prompt_eval_count")
                if key in present
            }
        )
        extra = {"model": data.model} if "model" in present else {}
        return ChatReply(
            sender="ai",
            content=content,
            timestamp=self.clock.now_ms(),
            metrics=metrics,
            **extra,
        )

    async def _call_upstream(self, body: OllamaChatRequest) -> OllamaChatResponse:
        resp = await self.client.post(self.cfg.chat_url, json=body.model_dump())
        if not resp.is_success:
            raise UpstreamStatusError(resp.status_code, resp.text)
        return OllamaChatResponse.from_body(resp.json())

    async def handle_chat(self, payload: Any) -> Dict[str, Any]:
        """Forward one chat request and return the reply envelope.

        Raises:
            RunnerError: for every failure; the status code and body follow the
                fixed 502/503/500 mapping in :mod:`neuro_runner.errors`.
        """
        started_at = time.time()
        record: Dict[str, Any] = {"model_requested": None, "model": None}
        try:
            request = ChatRequest.model_validate(
                payload if isinstance(payload, dict) else {}
            )
            upstream = self.build_upstream_request(request)
            record["model_requested"] = request.model
            record["model"] = upstream.model
            logger.info("[runner] Processing request for model %s", upstream.model)
            data = await self._call_upstream(upstream)
            reply = self.build_reply(data)
        except Exception as exc:
            kind = classify_failure(exc)
            if kind is FailureKind.UPSTREAM_ERROR:
                logger.error("[runner] Ollama error: %s", exc.body)  # type: ignore[attr-defined]
            elif kind is FailureKind.UNREACHABLE:
                logger.error(
                    "[runner] Ollama unreachable at %s: %s", self.cfg.chat_url, exc
                )
            else:
                logger.exception("[runner] Internal error")
            error = error_for_failure(exc)
            self._log_request(record, started_at, error.status_code, kind)
            raise error from exc

        total = data.total_duration
        if isinstance(total, (int, float)) and not isinstance(total, bool):
            logger.info("[runner] Generated response in %sms", total / 1_000_000)
        else:
            logger.info("[runner] Generated response (no duration reported)")
        record["upstream_model"] = data.model
        self._log_request(record, started_at, 200, None)
        return reply.model_dump(exclude_unset=True)

    def _log_request(
        self,
        record: Dict[str, Any],
        started_at: float,
        status: int,
        kind: Optional[FailureKind],
    ) -> None:
        if self.request_log is None:
            return
        record.update(
            {
                "ts": time.strftime("%Y-%m-%dT%H:%M:%S", time.gmtime(started_at)),
                "status": status,
                "outcome": kind.value if kind is not None else "ok",
                "latency_ms": round((time.time() - started_at) * 1000, 2),
            }
        )
        self.request_log.log(record)
