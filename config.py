"""
Central configuration — reads from .env file.

Everything here is a plain module attribute read once at import. Tokens are
allowed to be empty so tests can import the bot without a real .env;
main.py refuses to start without them.
"""
import os
from dotenv import load_dotenv

load_dotenv()

# ── Telegram ──────────────────────────────────────────────────────────────────
TELEGRAM_BOT_TOKEN: str = os.getenv("TELEGRAM_BOT_TOKEN", "")

# ── Gemini ────────────────────────────────────────────────────────────────────
# Get a key at https://aistudio.google.com. Search grounding must be enabled
# for the project (it is by default on the free tier).
GOOGLE_API_KEY: str = os.getenv("GOOGLE_API_KEY", "")
GEMINI_MODEL: str = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")
GEMINI_TEMPERATURE: float = float(os.getenv("GEMINI_TEMPERATURE", "0.2"))

# ── Pipeline ──────────────────────────────────────────────────────────────────
# Longest edge of the photo sent to Gemini, and its JPEG quality (1–95)
MAX_IMAGE_DIM: int = int(os.getenv("MAX_IMAGE_DIM", "1024"))
JPEG_QUALITY: int  = int(os.getenv("JPEG_QUALITY", "80"))

# Retries after the first attempt; the delay doubles each time (1s, 2s, 4s)
RETRY_COUNT: int        = int(os.getenv("RETRY_COUNT", "3"))
RETRY_BASE_DELAY: float = float(os.getenv("RETRY_BASE_DELAY", "1.0"))

# ── Bot behaviour ─────────────────────────────────────────────────────────────
RATE_MAX_REQUESTS: int = int(os.getenv("RATE_MAX_REQUESTS", "5"))
RATE_WINDOW_SECS: int  = int(os.getenv("RATE_WINDOW_SECS", "60"))

# How many grounding citations to list under a result
MAX_SOURCES_SHOWN: int = int(os.getenv("MAX_SOURCES_SHOWN", "5"))

# Log file lives here
DATA_DIR: str = os.getenv("DATA_DIR", "data")
