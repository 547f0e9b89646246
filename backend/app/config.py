import os
from pathlib import Path
from dotenv import load_dotenv

# Override=True so changes in backend/.env take effect on process reload (and not get
# stuck on old environment variables).
#
# For automated tests (SQLite), we need to prevent backend/.env from overriding the
# test DATABASE_URL. Set DISABLE_DOTENV=1 to skip loading .env.
if os.getenv("DISABLE_DOTENV") != "1":
    load_dotenv(override=True)


def _env_flag(name: str, default: str = "0") -> bool:
    return (os.getenv(name, default) or default).strip() in {"1", "true", "True", "yes", "YES"}


APP_ENV = (os.getenv("APP_ENV") or "production").strip().lower()
PORT = int(os.getenv("PORT", "5000") or "5000")

_raw_database_url = (os.getenv("DATABASE_URL") or "").strip()
# Default to a local SQLite DB for dev so the backend can start out-of-the-box.
# Use an absolute path so it works regardless of current working directory.
_default_sqlite_path = (Path(__file__).resolve().parent.parent / "dev.db").as_posix()
DATABASE_URL = _raw_database_url or f"sqlite:///{_default_sqlite_path}"

# Auth / JWT
# NOTE: keep a default for local dev so the server can boot even if SECRET_KEY isn't set.
SECRET_KEY = os.getenv("SECRET_KEY", "dev_secret_change_me")
ACCESS_TOKEN_EXPIRE_DAYS = int(os.getenv("ACCESS_TOKEN_EXPIRE_DAYS", "7") or "7")
RESET_TOKEN_EXPIRE_MINUTES = int(os.getenv("RESET_TOKEN_EXPIRE_MINUTES", "60") or "60")

# -------------------- AI suggestions (Gemini) --------------------
GEMINI_API_KEY = os.getenv("GEMINI_API_KEY")
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.0-flash")
GEMINI_BASE_URL = os.getenv("GEMINI_BASE_URL", "https://generativelanguage.googleapis.com")
GEMINI_API_VERSION = os.getenv("GEMINI_API_VERSION", "v1")

# Suggestions degrade to canned text, so keep the timeout short and don't retry.
AI_TIMEOUT_S = float(os.getenv("AI_TIMEOUT_S", "5") or "5")
AI_COVER_LETTER_TIMEOUT_S = float(os.getenv("AI_COVER_LETTER_TIMEOUT_S", "30") or "30")
AI_MAX_RETRIES = int(os.getenv("AI_MAX_RETRIES", "0") or "0")
AI_LOG_PAYLOADS = _env_flag("AI_LOG_PAYLOADS")

# Password reset links point at the frontend.
FRONTEND_URL = (os.getenv("FRONTEND_URL") or "http://localhost:5173").rstrip("/")

# Profile pictures are stored inline (base64 data URLs).
MAX_PROFILE_IMAGE_CHARS = 1_000_000
