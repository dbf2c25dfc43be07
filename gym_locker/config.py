from pathlib import Path
import os
from zoneinfo import ZoneInfo


BASE_DIR = Path(__file__).resolve().parent.parent
APP_ENV = os.getenv("APP_ENV", "development").strip().lower()
IS_PRODUCTION = APP_ENV in {"prod", "production"}


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


DATA_DIR = Path(os.getenv("DATA_DIR", str(BASE_DIR / "data")))
DATABASE_URL = os.getenv("DATABASE_URL", f"sqlite:///{DATA_DIR / 'gym.db'}")
SQL_ECHO = _env_bool("SQL_ECHO", False)
LOG_LEVEL = os.getenv("LOG_LEVEL", "WARNING" if IS_PRODUCTION else "INFO").strip().upper()

BUSINESS_TZ = ZoneInfo(os.getenv("APP_TIMEZONE", "Asia/Seoul"))

DEFAULT_MONTHLY_FEE = int(os.getenv("DEFAULT_MONTHLY_FEE", "50000"))
MIN_RENTAL_MONTHS = 1
MAX_RENTAL_MONTHS = 12
MONTH_OPTIONS = (1, 3, 6, 12)
POPULAR_MONTH_OPTIONS = frozenset({3, 6})
