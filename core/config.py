"""Settings read from the environment (and a local .env file)."""
import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(override=False)

ENV_PREFIX = "DAILYSYNC"


def _env(suffix: str, default: str = "") -> str:
    v = os.getenv(f"{ENV_PREFIX}_{suffix}")
    return default if v is None or v.strip() == "" else v.strip()


def _env_float(suffix: str, default: float) -> float:
    try:
        return float(_env(suffix, str(default)))
    except ValueError:
        return default


# ---------- remote store ----------
SUPABASE_URL = _env("SUPABASE_URL", "http://localhost:54321")
SUPABASE_ANON_KEY = _env("SUPABASE_ANON_KEY")
IDENTITY = _env("IDENTITY")
PASSWORD = _env("PASSWORD")
REQUEST_TIMEOUT = _env_float("REQUEST_TIMEOUT", 10.0)

# ---------- local files ----------
DATA_DIR = Path(_env("DATA_DIR", ".local/dailysync")).expanduser()
LOG_DIR = Path(_env("LOG_DIR", str(DATA_DIR / "logs"))).expanduser()
LOG_LEVEL = _env("LOG_LEVEL", "INFO").upper()
