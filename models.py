"""
Data models for the Routine Advisor catalog and chat assistant.
"""

from enum import Enum
from dataclasses import dataclass
from typing import Dict


class Role(Enum):
    SYSTEM    = "system"
    USER      = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class Product:
    """A catalog entry. Never mutated after load."""
    id: str
    name: str
    brand: str
    category: str
    description: str = ""
    image: str = ""

    @classmethod
    def from_dict(cls, raw: dict) -> "Product":
        # Catalogs may carry numeric ids; selection compares them as strings
        return cls(
            id=str(raw.get("id", "")),
            name=raw.get("name", "") or "",
            brand=raw.get("brand", "") or "",
            category=raw.get("category", "") or "",
            description=raw.get("description", "") or "",
            image=raw.get("image", "") or "",
        )


@dataclass(frozen=True)
class SelectedProduct:
    """Projection of a Product kept by the selection store."""
    id: str
    name: str
    brand: str

    @classmethod
    def from_dict(cls, raw: dict) -> "SelectedProduct":
        return cls(
            id=str(raw["id"]),
            name=str(raw.get("name", "") or ""),
            brand=str(raw.get("brand", "") or ""),
        )

    def to_dict(self) -> Dict[str, str]:
        return {"id": self.id, "name": self.name, "brand": self.brand}


@dataclass(frozen=True)
class ConversationTurn:
    role: Role
    content: str

    def to_message(self) -> Dict[str, str]:
        """Wire form expected by the relay: {"role": ..., "content": ...}."""
        return {"role": self.role.value, "content": self.content}


@dataclass
class ChatEntry:
    """One bubble in the chat window."""
    entry_id: str
    role: str                  # "user" or "assistant"
    text: str = ""
    kind: str = "message"      # message, typing, error, notice
