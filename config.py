import tomllib
import shutil
from pathlib import Path
from typing import Any, Dict, Optional
from dotenv import load_dotenv
import os

CONFIG_DIR = Path.home() / ".flashstudy"
CONFIG_PATH = CONFIG_DIR / "config.toml"
PROJECT_CONFIG_EXAMPLE = Path(__file__).parent / "config.toml"

def load_config() -> Dict[str, Any]:
    """Load config from ~/.flashstudy/config.toml, copy example if missing, load .env overrides."""
    load_dotenv()  # Load .env for overrides (e.g., FLASHSTUDY_PORT env var)
    if not CONFIG_PATH.exists():
        CONFIG_DIR.mkdir(parents=True, exist_ok=True)
        shutil.copy(PROJECT_CONFIG_EXAMPLE, CONFIG_PATH)
    with open(CONFIG_PATH, "rb") as f:
        config = tomllib.load(f)

    server_cfg = config.get("server", {})
    config["server"] = {
        "host": os.getenv("FLASHSTUDY_HOST", server_cfg.get("host", "127.0.0.1")),
        "port": int(os.getenv("FLASHSTUDY_PORT", server_cfg.get("port", 8000))),
    }
    media_cfg = config.get("media", {})
    media_dir = os.getenv("FLASHSTUDY_MEDIA_DIR", media_cfg.get("directory") or "")
    config["media"] = {
        "directory": str(Path(media_dir).expanduser()) if media_dir else str(CONFIG_DIR / "media"),
    }
    logging_cfg = config.get("logging", {})
    config["logging"] = {
        "level": os.getenv("FLASHSTUDY_LOG_LEVEL", logging_cfg.get("level", "INFO")).upper(),
    }
    return config

def get_config_value(section: str, key: str, default: Optional[Any] = None) -> Any:
    """Get nested config value, e.g., get_config_value('server', 'port')."""
    config = load_config()
    value = config.get(section, {}).get(key, default)
    return value
