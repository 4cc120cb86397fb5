import os
from pathlib import Path
import yaml
from dotenv import load_dotenv

from utils.logger import logger


def resolve_env(obj):
    """Replace "${VAR}" strings with the environment value (empty if unset)."""
    if isinstance(obj, dict):
        return {k: resolve_env(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [resolve_env(v) for v in obj]
    if isinstance(obj, str) and obj.startswith("${") and obj.endswith("}"):
        return os.getenv(obj[2:-1], "")
    return obj


def load_cfg(cfg_path: str | None = None):

    base_dir = Path(__file__).resolve().parents[1]

    cfg_file = Path(cfg_path) if cfg_path else (base_dir / "config.yaml")

    load_dotenv(base_dir / ".env")

    with open(cfg_file, "r", encoding="utf-8") as f:
        raw_cfg = yaml.safe_load(f) or {}

    cfg = resolve_env(raw_cfg)

    creds = cfg.get("credentials") or {}
    if not cfg.get("trading", {}).get("public_only") and not all(creds.get(k) for k in ("api_key", "secret_key", "passphrase")):
        logger.warning("FameEX credentials are incomplete; private endpoints will fail.")

    return cfg
