"""Application configuration loaded from environment variables."""

import logging
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# Paths
DATA_DIR = Path(os.getenv("DATA_DIR", Path(__file__).parent.parent / "data"))
LOG_DIR = DATA_DIR / "logs"
SESSION_PATH = Path(os.getenv("SESSION_PATH", DATA_DIR / "cookies.json"))
DB_PATH = Path(os.getenv("DB_PATH", DATA_DIR / "subscribers.db"))
ERROR_LOG = Path(os.getenv("ERROR_LOG", LOG_DIR / "server_actions.log"))
DETAIL_LOG = Path(os.getenv("DETAIL_LOG", LOG_DIR / "detailed_log.log"))

# Telegram
TELEGRAM_BOT_TOKEN = os.getenv("TELEGRAM_BOT_TOKEN", "")

# Minecraft server
MC_SERVER_HOST = os.getenv("MC_SERVER_HOST", "Mrvirak1234.aternos.me")
MC_SERVER_PORT = int(os.getenv("MC_SERVER_PORT", "46405"))
PROBE_TIMEOUT = float(os.getenv("PROBE_TIMEOUT", "3.0"))
PROBE_RETRIES = int(os.getenv("PROBE_RETRIES", "1"))
POLL_INTERVAL = float(os.getenv("POLL_INTERVAL", "300"))

# Start workflow
START_COOLDOWN = float(os.getenv("START_COOLDOWN", "300"))
START_SETTLE = float(os.getenv("START_SETTLE", "50"))
LOCK_RELEASE_AFTER = float(os.getenv("LOCK_RELEASE_AFTER", "0"))  # 0 = manual unlock only

# Browser
BROWSER_HEADLESS = os.getenv("BROWSER_HEADLESS", "true").lower() == "true"
SERVER_LIST_TIMEOUT = int(os.getenv("SERVER_LIST_TIMEOUT", "15000"))

# Operator control service
CONTROL_HOST = os.getenv("CONTROL_HOST", "127.0.0.1")
CONTROL_PORT = int(os.getenv("CONTROL_PORT", "8025"))
CONTROL_URL = f"http://{CONTROL_HOST}:{CONTROL_PORT}"


def ensure_dirs():
    """Create required data directories if they don't exist."""
    DATA_DIR.mkdir(parents=True, exist_ok=True)
    LOG_DIR.mkdir(parents=True, exist_ok=True)
    SESSION_PATH.parent.mkdir(parents=True, exist_ok=True)
    ERROR_LOG.parent.mkdir(parents=True, exist_ok=True)
    DETAIL_LOG.parent.mkdir(parents=True, exist_ok=True)


def configure_logging(level: int = logging.INFO) -> logging.Logger:
    """Attach stderr, detail-log and error-log handlers to the package logger.

    The two files are append-only: the detail log narrates the lifecycle,
    the error log only receives ERROR records.
    """
    ensure_dirs()
    logger = logging.getLogger("aternos_starter")
    if logger.handlers:
        return logger

    stream = logging.StreamHandler(sys.stderr)
    stream.setFormatter(logging.Formatter("%(asctime)s [%(name)s] %(levelname)s: %(message)s"))

    detail = logging.FileHandler(DETAIL_LOG, mode="a", encoding="utf-8")
    detail.setLevel(logging.INFO)
    detail.setFormatter(logging.Formatter("[%(asctime)s] DETAIL: %(message)s"))

    errors = logging.FileHandler(ERROR_LOG, mode="a", encoding="utf-8")
    errors.setLevel(logging.ERROR)
    errors.setFormatter(logging.Formatter("[%(asctime)s] ERROR: %(message)s"))

    logger.addHandler(stream)
    logger.addHandler(detail)
    logger.addHandler(errors)
    logger.setLevel(level)
    return logger
