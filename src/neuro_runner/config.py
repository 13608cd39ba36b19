from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

DEFAULT_MODEL = "llama3"
SERVICE_NAME = "neuro-runner"


@dataclass
class RunnerConfig:
    host: str = "0.0.0.0"
    port: int = 3002
    ollama_url: str = "http://127.0.0.1:11434"
    # 0 disables the client timeout entirely
    backend_timeout_ms: int = 120_000
    request_log_path: Optional[str] = None
    max_log_bytes: int = 25_000_000
    log_level: str = "INFO"
    config_file_path: Optional[str] = None

    @property
    def chat_url(self) -> str:
        return f"{self.ollama_url.rstrip('/')}/api/chat"

    @property
    def backend_timeout_s(self) -> float | None:
        if self.backend_timeout_ms <= 0:
            return None
        return self.backend_timeout_ms / 1000

    @classmethod
    def load(cls) -> "RunnerConfig":
        from .config_loader import load_runner_config

        return load_runner_config()
