"""
Filter Engine

Derives the visible subset of the catalog from a category selector and a
free-text keyword, then redraws the product grid.
"""

import asyncio
from typing import Iterable, List, Optional

from models import Product
from chat_logger import get_logger, sanitize_log_string

logger = get_logger("routine_advisor")


def filter_products(products: Iterable[Product], category: Optional[str], keyword: Optional[str]) -> List[Product]:
    """
    Keep products matching both filters, in catalog order.

    - category: exact, case-sensitive match on Product.category
    - keyword: case-insensitive substring of "name brand description"
    Empty values disable the corresponding filter.
    """
    needle = (keyword or "").strip().lower()
    result = []
    for product in products:
        if category and product.category != category:
            continue
        if needle:
            haystack = f"{product.name} {product.brand} {product.description}".lower()
            if needle not in haystack:
                continue
        result.append(product)
    return result


class FilterEngine:
    def __init__(self, catalog, view, selection=None):
        self.catalog = catalog
        self.view = view
        self.selection = selection

    async def render(self, category: str = "", keyword: str = "") -> List[Product]:
        """Reload the catalog, filter it and replace the displayed cards."""
        products = await asyncio.to_thread(self.catalog.load)
        visible = filter_products(products, category, keyword)

        self.view.show_products(visible)
        # A redraw clears marks; restore them for selected items still visible
        if self.selection is not None:
            for product_id in self.selection.ids():
                self.view.set_highlight(product_id, True)

        logger.info(
            f'Filter | category="{sanitize_log_string(category or "")}" | '
            f'keyword="{sanitize_log_string(keyword or "")}" | '
            f'visible={len(visible)}/{len(products)}'
        )
        return visible
