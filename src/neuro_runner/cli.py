"""Typer CLI for running and inspecting the runner."""

from __future__ import annotations

import asyncio
import json
from dataclasses import asdict
from pathlib import Path
from typing import Optional

import typer

from .config import RunnerConfig
from .config_loader import (
    config_path,
    list_env_overrides,
    load_file_config,
    write_config,
)
from .probe import OllamaProbe

app = typer.Typer(help="NeuroSwarm Runner - HTTP bridge to a local Ollama daemon")


def _load_with_overrides(
    host: Optional[str],
    port: Optional[int],
    ollama_url: Optional[str],
    log_level: Optional[str],
) -> RunnerConfig:
    cfg = RunnerConfig.load()
    if host:
        cfg.host = host
    if port is not None:
        cfg.port = port
    if ollama_url:
        cfg.ollama_url = ollama_url
    if log_level:
        cfg.log_level = log_level.upper()
    return cfg


@app.command("serve")
def cmd_serve(
    host: Optional[str] = typer.Option(None, "--host", help="Bind address"),
    port: Optional[int] = typer.Option(None, "--port", help="Listen port"),
    ollama_url: Optional[str] = typer.Option(
        None, "--ollama-url", help="Base URL of the Ollama daemon"
    ),
    log_level: Optional[str] = typer.Option(None, "--log-level"),
):  # pragma: no cover - starts a server
    """Run the HTTP bridge."""
    import uvicorn

    from .app import create_app
    from .logging_utils import configure_logging

    cfg = _load_with_overrides(host, port, ollama_url, log_level)
    configure_logging(cfg.log_level)
    uvicorn.run(create_app(cfg), host=cfg.host, port=cfg.port, log_config=None)


@app.command("show-config")
def cmd_show_config(
    json_output: bool = typer.Option(False, "--json-output", help="Emit JSON"),
):
    """Print the effective configuration (defaults < file < environment)."""
    cfg = RunnerConfig.load()
    data = asdict(cfg)
    if json_output:
        typer.echo(
            json.dumps(
                {
                    "runtime": data,
                    "file": load_file_config(),
                    "env_overrides": list_env_overrides(),
                },
                indent=2,
            )
        )
        return
    for key, value in data.items():
        typer.echo(f"{key:<20} {value}")


@app.command("init-config")
def cmd_init_config(
    path: Optional[Path] = typer.Option(
        None, "--path", help="Target file (defaults to NEURO_RUNNER_CONFIG_FILE)"
    ),
    force: bool = typer.Option(False, "--force", help="Overwrite an existing file"),
):
    """Write a config file populated with the built-in defaults."""
    target = Path(path) if path else config_path()
    if target.exists() and not force:
        typer.echo(f"Config already exists at {target} (use --force to overwrite)")
        raise typer.Exit(1)
    written = write_config(RunnerConfig(), target)
    typer.echo(f"Wrote {written}")


@app.command("ping")
def cmd_ping():
    """Check whether the configured Ollama daemon answers."""
    cfg = RunnerConfig.load()
    version = asyncio.run(OllamaProbe(cfg).version())
    if version is None:
        typer.echo(f"Ollama unreachable at {cfg.ollama_url}")
        raise typer.Exit(1)
    typer.echo(f"Ollama {version} reachable at {cfg.ollama_url}")


def main():  # pragma: no cover
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
