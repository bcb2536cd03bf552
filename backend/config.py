import logging
import os
from typing import Optional

GEMINI_API_KEY = os.getenv("GEMINI_API_KEY", "")
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.5-flash-image")
GEMINI_ENDPOINT = os.getenv(
    "GEMINI_ENDPOINT",
    "https://generativelanguage.googleapis.com/v1beta/models/"
    f"{GEMINI_MODEL}:generateContent",
)

# Unset means no client-side timeout; the transport default applies
GEMINI_TIMEOUT: Optional[float]
try:
    GEMINI_TIMEOUT = float(os.environ["GEMINI_TIMEOUT"])
except (KeyError, ValueError):
    GEMINI_TIMEOUT = None

TEMPLATES_DIR = os.getenv("TEMPLATES_DIR", "")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

HOST = os.getenv("HOST", "0.0.0.0")
try:
    PORT = int(os.getenv("PORT", "8000"))
except Exception:
    PORT = 8000


logger = logging.getLogger("hoodie_portrait_studio")
logger.setLevel(getattr(logging, LOG_LEVEL, logging.INFO))
