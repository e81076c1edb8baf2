from pathlib import Path

import config


def _use_config(tmp_path: Path, monkeypatch, text: str) -> Path:
    config_dir = tmp_path / ".flashstudy"
    config_dir.mkdir()
    config_path = config_dir / "config.toml"
    config_path.write_text(text, encoding="utf-8")
    monkeypatch.setattr(config, "load_dotenv", lambda: None)
    monkeypatch.setattr(config, "CONFIG_DIR", config_dir)
    monkeypatch.setattr(config, "CONFIG_PATH", config_path)
    for name in ("FLASHSTUDY_HOST", "FLASHSTUDY_PORT", "FLASHSTUDY_MEDIA_DIR", "FLASHSTUDY_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    return config_dir


def test_defaults_when_sections_missing(tmp_path, monkeypatch):
    config_dir = _use_config(tmp_path, monkeypatch, "")
    cfg = config.load_config()
    assert cfg["server"] == {"host": "127.0.0.1", "port": 8000}
    assert cfg["media"]["directory"] == str(config_dir / "media")
    assert cfg["logging"]["level"] == "INFO"


def test_env_overrides_file(tmp_path, monkeypatch):
    _use_config(tmp_path, monkeypatch, "[server]\nport = 9000\n\n[logging]\nlevel = \"warning\"\n")
    assert config.get_config_value("server", "port") == 9000
    assert config.get_config_value("logging", "level") == "WARNING"

    monkeypatch.setenv("FLASHSTUDY_PORT", "9100")
    monkeypatch.setenv("FLASHSTUDY_MEDIA_DIR", str(tmp_path / "clips"))
    cfg = config.load_config()
    assert cfg["server"]["port"] == 9100
    assert cfg["media"]["directory"] == str(tmp_path / "clips")


def test_example_config_copied_on_first_run(tmp_path, monkeypatch):
    config_dir = tmp_path / "fresh"
    monkeypatch.setattr(config, "load_dotenv", lambda: None)
    monkeypatch.setattr(config, "CONFIG_DIR", config_dir)
    monkeypatch.setattr(config, "CONFIG_PATH", config_dir / "config.toml")
    config.load_config()
    assert (config_dir / "config.toml").read_text() == config.PROJECT_CONFIG_EXAMPLE.read_text()
    assert config.get_config_value("missing", "key", "fallback") == "fallback"
