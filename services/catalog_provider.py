"""
Catalog Provider — reads the static product list.

The catalog is re-read on every call; there is no cache, so a filter change
always sees the current file or URL contents.
"""

import json
import requests
from pathlib import Path
from typing import List, Optional, Union

from models import Product
from chat_logger import get_logger

logger = get_logger("routine_advisor")

REQUEST_TIMEOUT = 30


class CatalogProvider:
    """Loads `{"products": [...]}` from a JSON file path or an http(s) URL."""

    def __init__(self, source: Union[str, Path], session: Optional[requests.Session] = None):
        self.source = str(source)
        self.timeout = REQUEST_TIMEOUT
        self.session = session or requests.Session()
        self.session.headers.update({"Accept": "application/json"})

    @property
    def is_remote(self) -> bool:
        return self.source.startswith(("http://", "https://"))

    def _fetch_document(self) -> dict:
        if self.is_remote:
            response = self.session.get(self.source, timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        return json.loads(Path(self.source).read_text(encoding="utf-8"))

    def load(self) -> List[Product]:
        """Fetch the full catalog in document order."""
        document = self._fetch_document()
        products = [Product.from_dict(raw) for raw in document.get("products", [])]
        logger.debug(f"Catalog loaded | source={self.source} | products={len(products)}")
        return products
