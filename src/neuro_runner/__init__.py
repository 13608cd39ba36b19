"""HTTP bridge forwarding chat requests to a local Ollama daemon.

Exposes ``GET /health`` and ``POST /chat``; see :mod:`neuro_runner.app`.
"""

__all__ = ["__version__"]

__version__ = "0.1.0"
