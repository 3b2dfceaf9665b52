"""
Application configuration module for the Routine Advisor.
Contains environment variables, constants, and settings.
"""

import os
from typing import Optional
from dotenv import load_dotenv

load_dotenv()


def _optional_float(name: str) -> Optional[float]:
    value = os.getenv(name, "").strip()
    return float(value) if value else None


# ═══════════════════════════════════════════
# RELAY SERVER
# ═══════════════════════════════════════════

PORT = int(os.getenv("PORT", 8787))
DEBUG = os.getenv("DEBUG", "false").lower() == "true"

# Server-held credential, never sent to or read by the client side
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY", "")
OPENAI_API_URL = os.getenv("OPENAI_API_URL", "https://api.openai.com/v1/chat/completions")
OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-4o")
LLM_TIMEOUT_SECONDS = int(os.getenv("LLM_TIMEOUT_SECONDS", "60"))

CORS_ALLOWED_METHODS = ["POST", "OPTIONS"]
CORS_ALLOWED_HEADERS = ["Content-Type"]

# ═══════════════════════════════════════════
# CLIENT SIDE
# ═══════════════════════════════════════════

RELAY_URL = os.getenv("RELAY_URL", "http://localhost:8787/")
# Unset means wait forever, matching the browser fetch it replaces
RELAY_TIMEOUT_SECONDS = _optional_float("RELAY_TIMEOUT_SECONDS")

CATALOG_SOURCE = os.getenv("CATALOG_SOURCE", "products.json")
STORAGE_PATH = os.getenv("STORAGE_PATH", ".routine_storage.json")
SELECTION_STORAGE_KEY = "selectedProducts"

# ═══════════════════════════════════════════
# LOGGING
# ═══════════════════════════════════════════

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_DIR = os.getenv("LOG_DIR", "logs")
