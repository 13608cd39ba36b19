import os
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parent.parent
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

RUNNER_ENV_KEYS = ("PORT", "OLLAMA_URL")


@pytest.fixture(autouse=True)
def clean_runner_env(monkeypatch, tmp_path):
    """Keep host environment and config files out of every test."""

    for key in list(os.environ.keys()):
        if key.startswith("NEURO_RUNNER_") or key in RUNNER_ENV_KEYS:
            monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("NEURO_RUNNER_CONFIG_FILE", str(tmp_path / "runner.toml"))
    yield
