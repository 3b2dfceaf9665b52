"""Core package - exports durable storage backends."""

from .storage import (
    LocalStorage,
    MemoryStorage,
)

__all__ = [
    "LocalStorage",
    "MemoryStorage",
]
