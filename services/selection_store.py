"""
Selection Store

Keeps the user's routine products in insertion order and mirrors every
change to durable storage, the product grid highlight and the
selected-products panel.
"""

import json
from typing import List, Optional, Set

from models import SelectedProduct
from app_config import SELECTION_STORAGE_KEY
from chat_logger import get_logger

logger = get_logger("routine_advisor")


# ═══════════════════════════════════════════
# PURE TRANSITIONS
# ═══════════════════════════════════════════

def toggle_selection(items: List[SelectedProduct], product_id, name: str, brand: str) -> List[SelectedProduct]:
    """Remove product_id if present, otherwise append it at the end."""
    product_id = str(product_id)
    if any(item.id == product_id for item in items):
        return remove_selection(items, product_id)
    return list(items) + [SelectedProduct(id=product_id, name=name, brand=brand)]


def remove_selection(items: List[SelectedProduct], product_id) -> List[SelectedProduct]:
    product_id = str(product_id)
    return [item for item in items if item.id != product_id]


def serialize_selection(items: List[SelectedProduct]) -> str:
    return json.dumps([item.to_dict() for item in items])


def parse_persisted_selection(raw: Optional[str]) -> List[SelectedProduct]:
    """
    Decode the stored selection.

    Returns an empty list for a missing value, invalid JSON or a non-list
    payload. Entries without an id are dropped; for duplicate ids the first
    occurrence wins.
    """
    if not raw:
        return []
    try:
        data = json.loads(raw)
    except ValueError:
        logger.warning("Selection | stored value is not valid JSON, starting empty")
        return []
    if not isinstance(data, list):
        logger.warning(f"Selection | stored value is {type(data).__name__}, expected list, starting empty")
        return []

    items: List[SelectedProduct] = []
    seen: Set[str] = set()
    for entry in data:
        if not isinstance(entry, dict) or entry.get("id") in (None, ""):
            continue
        item = SelectedProduct.from_dict(entry)
        if item.id in seen:
            continue
        seen.add(item.id)
        items.append(item)
    return items


# ═══════════════════════════════════════════
# STORE
# ═══════════════════════════════════════════

class SelectionStore:
    """Ordered set of SelectedProduct synchronized with storage and a view."""

    def __init__(self, storage, view=None, storage_key: str = SELECTION_STORAGE_KEY):
        self.storage = storage
        self.view = view
        self.storage_key = storage_key
        self.items: List[SelectedProduct] = []

    def ids(self) -> List[str]:
        return [item.id for item in self.items]

    def contains(self, product_id) -> bool:
        return str(product_id) in self.ids()

    def __len__(self) -> int:
        return len(self.items)

    def toggle(self, product_id, name: str, brand: str) -> bool:
        """Flip membership of product_id. Returns True if it is now selected."""
        self.items = toggle_selection(self.items, product_id, name, brand)
        selected = self.contains(product_id)
        self._commit(product_id, selected)
        logger.info(f"Selection | toggle id={product_id} | selected={selected} | count={len(self.items)}")
        return selected

    def remove(self, product_id) -> None:
        self.items = remove_selection(self.items, product_id)
        self._commit(product_id, False)
        logger.info(f"Selection | remove id={product_id} | count={len(self.items)}")

    def hydrate(self) -> List[SelectedProduct]:
        """Load the persisted selection once at startup. Never raises on bad data."""
        try:
            raw = self.storage.get_item(self.storage_key)
        except (OSError, ValueError) as e:
            logger.warning(f"Selection | storage unreadable, starting empty | error={e}")
            raw = None

        self.items = parse_persisted_selection(raw)
        if self.view is not None:
            self.view.render_selected(self.items)
            for item in self.items:
                self.view.set_highlight(item.id, True)

        logger.info(f"Selection | hydrated count={len(self.items)}")
        return list(self.items)

    def _commit(self, product_id, selected: bool) -> None:
        """Full rewrite of storage and the panel after a mutation."""
        self.storage.set_item(self.storage_key, serialize_selection(self.items))
        if self.view is not None:
            self.view.set_highlight(product_id, selected)
            self.view.render_selected(self.items)
