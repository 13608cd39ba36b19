from __future__ import annotations

import logging

import httpx

from .config import RunnerConfig

logger = logging.getLogger(__name__)


class OllamaProbe:
    """One-shot reachability check against the Ollama daemon."""

    def __init__(self, cfg: RunnerConfig, timeout_s: float = 5.0):
        self.base_url = cfg.ollama_url.rstrip("/")
        self.timeout_s = timeout_s

    async def version(self) -> str | None:
        """Return the daemon's reported version, or ``None`` when unreachable."""
        try:
            async with httpx.AsyncClient(timeout=self.timeout_s) as client:
                resp = await client.get(f"{self.base_url}/api/version")
                resp.raise_for_status()
                payload = resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("[runner] Ollama health check failed: %s", exc)
            return None
        if not isinstance(payload, dict):
            return None
        return str(payload.get("version") or "unknown")
