"""
chat_logger.py - Centralized logging configuration for the Routine Advisor

Sets up Python logging with:
- File handler: <LOG_DIR>/YYYY-MM-DD/chat.txt (daily folder)
- Console handler: stdout
- Configurable log level via LOG_LEVEL env variable
- Redaction of the relay credential (bearer tokens, API keys)
"""

import os
import re
import logging
from datetime import datetime
from pathlib import Path


def sanitize_log_string(text: str) -> str:
    """
    Sanitize string for logging to prevent log injection attacks.
    Removes newlines, carriage returns, and other control characters.

    Args:
        text: String to sanitize

    Returns:
        Sanitized string safe for logging
    """
    if not text:
        return text
    text = text.replace('\n', ' ').replace('\r', ' ').replace('\t', ' ')
    text = ''.join(char if ord(char) >= 32 else ' ' for char in text)
    return text


def redact_secret(text: str) -> str:
    """
    Mask bearer tokens and OpenAI-style keys so they never reach a log line.

    Args:
        text: String potentially containing a credential

    Returns:
        Redacted string
    """
    if not text:
        return text
    text = re.sub(r'(Bearer\s+)[^\s"\']+', r'\1***', text)
    text = re.sub(r'sk-[A-Za-z0-9_\-]{8,}', 'sk-***', text)
    return text


class MillisecondFormatter(logging.Formatter):
    """Formatter that appends milliseconds to the configured datefmt."""

    def formatTime(self, record, datefmt=None):
        if datefmt:
            s = datetime.fromtimestamp(record.created).strftime(datefmt)
            ms = int((record.created - int(record.created)) * 1000)
            return f"{s}.{ms:03d}"
        return super().formatTime(record, datefmt)


def setup_logger(name: str = "routine_advisor", log_level: str = "INFO") -> logging.Logger:
    """
    Configure and return a logger with file and console handlers.

    Args:
        name: Logger name
        log_level: Log level string (DEBUG, INFO, WARNING, ERROR, CRITICAL)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG)

    # Prevent duplicate handlers if setup is called multiple times
    if logger.handlers:
        return logger

    formatter = MillisecondFormatter(
        fmt="[%(asctime)s] [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    # ─── File Handler (one folder per day) ───
    today = datetime.now().strftime("%Y-%m-%d")
    log_dir = Path(os.getenv("LOG_DIR", "logs")) / today
    log_dir.mkdir(parents=True, exist_ok=True)

    file_handler = logging.FileHandler(log_dir / "chat.txt", encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    # ─── Console Handler ───
    console_handler = logging.StreamHandler()
    console_handler.setLevel(getattr(logging, log_level.upper(), logging.INFO))
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    return logger


def get_logger(name: str = "routine_advisor") -> logging.Logger:
    """
    Get the configured logger instance.
    If logger doesn't exist, create it with default settings.

    Args:
        name: Logger name

    Returns:
        Logger instance
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        log_level = os.getenv("LOG_LEVEL", "INFO")
        setup_logger(name, log_level)
    return logger
