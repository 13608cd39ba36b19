from __future__ import annotations

import os
import tempfile
from dataclasses import asdict, fields
from pathlib import Path
from typing import Any, Callable

try:
    import tomllib  # Python 3.11+
except ModuleNotFoundError:  # pragma: no cover
    import tomli as tomllib  # type: ignore[no-redef]

from .config import RunnerConfig

CONFIG_FILE_ENV = "NEURO_RUNNER_CONFIG_FILE"
ENV_PREFIX = "NEURO_RUNNER_"
DEFAULT_CONFIG_PATH = Path("configs/neuro_runner.toml")

_SECTION_MAP: dict[str, list[str]] = {
    "server": ["host", "port"],
    "ollama": ["ollama_url", "backend_timeout_ms"],
    "logging": ["log_level", "request_log_path", "max_log_bytes"],
}


def _field_types() -> dict[str, Any]:
    return {f.name: f.type for f in fields(RunnerConfig)}


def _coerce_int(value: Any) -> int:
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    return int(str(value))


def _coerce_str(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def _coerce_optional_str(value: Any) -> str | None:
    if value in ("", None):
        return None
    return str(value)


# Field annotations are strings under ``from __future__ import annotations``.
_CASTERS: dict[str, Callable[[Any], Any]] = {
    "int": _coerce_int,
    "str": _coerce_str,
    "Optional[str]": _coerce_optional_str,
}


def _read_config_file(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    with path.open("rb") as fh:
        data = tomllib.load(fh)

    out: dict[str, Any] = {}
    for section, keys in _SECTION_MAP.items():
        section_values = data.get(section, {})
        if not isinstance(section_values, dict):
            continue
        for key in keys:
            if key in section_values:
                out[key] = section_values[key]
    return out


def _apply_env_overrides(config: dict[str, Any]) -> dict[str, Any]:
    env = os.environ

    def env_int(name: str, current: int) -> int:
        val = env.get(name)
        if val is None:
            return current
        try:
            return int(val)
        except ValueError:
            return current

    def env_str(name: str, current: str | None) -> str | None:
        val = env.get(name)
        if val is None:
            return current
        return val

    overrides = {
        "host": env_str("NEURO_RUNNER_HOST", config["host"]),
        "port": env_int("PORT", config["port"]),
        "ollama_url": env_str("OLLAMA_URL", config["ollama_url"]),
        "backend_timeout_ms": env_int(
            "NEURO_RUNNER_BACKEND_TIMEOUT_MS", config["backend_timeout_ms"]
        ),
        "request_log_path": env_str(
            "NEURO_RUNNER_REQUEST_LOG", config.get("request_log_path")
        ),
        "max_log_bytes": env_int(
            "NEURO_RUNNER_MAX_LOG_BYTES", config["max_log_bytes"]
        ),
        "log_level": env_str("NEURO_RUNNER_LOG_LEVEL", config["log_level"]),
    }
    config.update(overrides)
    if not config.get("request_log_path"):
        config["request_log_path"] = None
    return config


def _default_config_dict() -> dict[str, Any]:
    data = asdict(RunnerConfig())
    data.pop("config_file_path", None)
    return data


def _normalize(config: dict[str, Any]) -> dict[str, Any]:
    field_types = _field_types()
    normalized = {}
    for key, default_value in _default_config_dict().items():
        value = config.get(key, default_value)
        caster = _CASTERS.get(str(field_types.get(key)))
        try:
            normalized[key] = caster(value) if caster else value
        except (TypeError, ValueError):
            normalized[key] = default_value
    return normalized


def config_path() -> Path:
    return Path(os.environ.get(CONFIG_FILE_ENV, DEFAULT_CONFIG_PATH)).expanduser()


def load_file_config() -> dict[str, Any]:
    base = _default_config_dict()
    base.update(_read_config_file(config_path()))
    return _normalize(base)


def load_runner_config() -> RunnerConfig:
    candidate = config_path()
    file_values = _read_config_file(candidate)
    normalized = _normalize(file_values)
    normalized = _apply_env_overrides(normalized)
    cfg = RunnerConfig(**normalized)
    cfg.config_file_path = str(candidate) if candidate.exists() else None
    return cfg


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    if value is None:
        return '""'
    escaped = str(value).replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def write_config(config: RunnerConfig, path: Path | None = None) -> Path:
    path = Path(path or config_path()).expanduser()
    config_dict = asdict(config)
    lines: list[str] = [
        "# neuro-runner configuration.",
        "# Environment variables (PORT, OLLAMA_URL, NEURO_RUNNER_*) take precedence.",
    ]
    for section, keys in _SECTION_MAP.items():
        lines.append("")
        lines.append(f"[{section}]")
        for key in keys:
            lines.append(f"{key} = {_format_value(config_dict[key])}")

    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_fd, tmp_path = tempfile.mkstemp(
        prefix="neuro_runner_config_", suffix=".toml", dir=path.parent
    )
    try:
        with os.fdopen(tmp_fd, "w", encoding="utf-8") as handle:
            handle.write("\n".join(lines) + "\n")
        Path(tmp_path).replace(path)
    finally:
        try:
            os.unlink(tmp_path)
        except FileNotFoundError:
            pass
    return path


def list_env_overrides() -> dict[str, str]:
    return {
        key: value
        for key, value in os.environ.items()
        if key.startswith(ENV_PREFIX) or key in {"PORT", "OLLAMA_URL"}
    }
