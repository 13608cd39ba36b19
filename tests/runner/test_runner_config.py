from neuro_runner import config_loader
from neuro_runner.config import RunnerConfig


def test_defaults_without_file_or_env(tmp_path):
    cfg = config_loader.load_runner_config()

    assert cfg.port == 3002
    assert cfg.ollama_url == "http://127.0.0.1:11434"
    assert cfg.request_log_path is None
    assert cfg.config_file_path is None
    assert cfg.chat_url == "http://127.0.0.1:11434/api/chat"
    assert not (tmp_path / "runner.toml").exists()


def test_port_and_ollama_url_from_environment(monkeypatch):
    monkeypatch.setenv("PORT", "4010")
    monkeypatch.setenv("OLLAMA_URL", "http://gpu-box:11434/")

    cfg = config_loader.load_runner_config()

    assert cfg.port == 4010
    assert cfg.chat_url == "http://gpu-box:11434/api/chat"


def test_invalid_numeric_env_keeps_current_value(monkeypatch):
    monkeypatch.setenv("PORT", "not-a-port")
    monkeypatch.setenv("NEURO_RUNNER_BACKEND_TIMEOUT_MS", "soon")

    cfg = config_loader.load_runner_config()

    assert cfg.port == 3002
    assert cfg.backend_timeout_ms == 120_000


def test_file_values_and_env_precedence(tmp_path, monkeypatch):
    path = tmp_path / "runner.toml"
    path.write_text(
        "[server]\nport = 3100\nhost = \"127.0.0.1\"\n"
        "[ollama]\nollama_url = \"http://file-host:11434\"\nbackend_timeout_ms = 0\n"
        "[logging]\nrequest_log_path = \"logs/req.jsonl\"\n",
        encoding="utf-8",
    )

    cfg = config_loader.load_runner_config()
    assert cfg.port == 3100
    assert cfg.host == "127.0.0.1"
    assert cfg.ollama_url == "http://file-host:11434"
    assert cfg.backend_timeout_s is None
    assert cfg.request_log_path == "logs/req.jsonl"
    assert cfg.config_file_path == str(path)

    monkeypatch.setenv("PORT", "3200")
    cfg = config_loader.load_runner_config()
    assert cfg.port == 3200
    assert config_loader.load_file_config()["port"] == 3100
    assert config_loader.list_env_overrides()["PORT"] == "3200"


def test_write_config_round_trips_defaults(tmp_path):
    target = config_loader.write_config(RunnerConfig(port=3300), tmp_path / "cfg" / "runner.toml")

    assert target.exists()
    file_cfg = config_loader._read_config_file(target)
    assert file_cfg["port"] == 3300
    assert file_cfg["request_log_path"] == ""
    normalized = config_loader._normalize(file_cfg)
    assert normalized["request_log_path"] is None


def test_timeout_conversion():
    assert RunnerConfig(backend_timeout_ms=2500).backend_timeout_s == 2.5
    assert RunnerConfig(backend_timeout_ms=0).backend_timeout_s is None
