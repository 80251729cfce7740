from __future__ import annotations
import logging
import os
from pathlib import Path
from typing import Any, Dict
import yaml

ROOT = Path(__file__).resolve().parents[1]
DEFAULT_CONFIG = ROOT / "config" / "pidoku.yaml"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# env var -> (section, key, cast)
ENV_OVERRIDES = {
    "PIDOKU_HOST": ("server", "host", str),
    "PIDOKU_PORT": ("server", "port", int),
    "PIDOKU_LOG_LEVEL": ("logging", "level", str),
}

class DotDict(dict):
    __getattr__ = dict.get
    __setattr__ = dict.__setitem__
    __delattr__ = dict.__delitem__

def _wrap(data: Any) -> Any:
    if isinstance(data, dict):
        return DotDict({k: _wrap(v) for k, v in data.items()})
    return data

def load_yaml(path: str | Path) -> DotDict:
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    return _wrap(data)

def merge_overrides(cfg: Dict[str, Any], **overrides) -> Dict[str, Any]:
    for k, v in overrides.items():
        if v is None:
            continue
        cfg[k] = v
    return cfg

def load_settings(path: str | Path | None = None, env: Dict[str, str] | None = None) -> DotDict:
    """Read the YAML settings (explicit path, then $PIDOKU_CONFIG, then the bundled default) and apply env overrides."""
    env = os.environ if env is None else env
    cfg = load_yaml(path or env.get("PIDOKU_CONFIG") or DEFAULT_CONFIG)
    for name, (section, key, cast) in ENV_OVERRIDES.items():
        if name in env:
            cfg.setdefault(section, DotDict())
            merge_overrides(cfg[section], **{key: cast(env[name])})
    return cfg

def setup_logging(cfg: Dict[str, Any] | None = None, level: str | None = None) -> None:
    name = level or ((cfg or {}).get("logging") or {}).get("level") or "INFO"
    logging.basicConfig(format=LOG_FORMAT, level=getattr(logging, str(name).upper(), logging.INFO))
