from __future__ import annotations

import json
import logging
import os
import sys
from dataclasses import asdict
from pathlib import Path

from .settings import Settings

log = logging.getLogger("chainscope.settings")

APP_DIRNAME = "chainscope"
FILENAME = "settings.json"


def _local_config_dir() -> Path:
    """Config directory.

    Priority:
      1) CHAINSCOPE_CONFIG_DIR
      2) next to the executable when bundled
      3) backend/.chainscope/ for source runs
    """
    env_dir = (os.environ.get("CHAINSCOPE_CONFIG_DIR") or "").strip()
    if env_dir:
        return Path(env_dir).expanduser().resolve()

    if getattr(sys, "frozen", False):
        exe_dir = Path(sys.executable).resolve().parent
        return exe_dir / f".{APP_DIRNAME}"

    backend_dir = Path(__file__).resolve().parent
    return backend_dir / f".{APP_DIRNAME}"


def _config_path() -> Path:
    cfg_dir = _local_config_dir()
    cfg_dir.mkdir(parents=True, exist_ok=True)
    return cfg_dir / FILENAME


def _read_settings_file(path: Path) -> dict:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {}
    except (OSError, ValueError) as e:
        # Corrupt file: run on defaults, user can delete it
        log.warning("Ignoring unreadable settings file %s: %s", path, e)
        return {}
    return data if isinstance(data, dict) else {}


def load_settings() -> Settings:
    """Load settings from the config dir, then apply env overrides.

    CHAINSCOPE_API_URL overrides `api_base_url`.
    """
    data = _read_settings_file(_config_path())

    s = Settings()
    for k, v in data.items():
        if hasattr(s, k):
            setattr(s, k, v)

    env_url = (os.environ.get("CHAINSCOPE_API_URL") or "").strip()
    if env_url:
        s.api_base_url = env_url
    return s


def save_settings(settings: Settings) -> None:
    """Save settings to the config dir."""
    path = _config_path()
    tmp = path.with_suffix(".tmp")

    data = asdict(settings)
    # Write atomically (reduce risk of partial writes)
    tmp.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
    tmp.replace(path)
