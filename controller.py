"""
Routine Advisor controller.

Wires one instance of every component together and exposes the page's
event handlers. All state hangs off the instance, so several advisors can
run side by side (one per test, one per browser tab being simulated).
"""

import asyncio
from typing import List, Optional, Set

from app_config import CATALOG_SOURCE, STORAGE_PATH, RELAY_URL, RELAY_TIMEOUT_SECONDS
from core import LocalStorage
from services import (
    CatalogProvider,
    ChatView,
    ConversationManager,
    FilterEngine,
    ProductView,
    RelayClient,
    SelectionStore,
)
from models import Product
from chat_logger import get_logger

logger = get_logger("routine_advisor")


class RoutineAdvisor:
    def __init__(self, catalog, storage, relay, product_view=None, chat_view=None):
        self.product_view = product_view or ProductView()
        self.chat_view = chat_view or ChatView()
        self.selection = SelectionStore(storage, self.product_view)
        self.filters = FilterEngine(catalog, self.product_view, self.selection)
        self.conversation = ConversationManager(relay, self.chat_view, self.selection, catalog)

        self.category = ""
        self.keyword = ""
        self._tasks: Set[asyncio.Task] = set()

    # ─── Startup ───

    def start(self) -> None:
        self.selection.hydrate()

    # ─── Product grid ───

    async def on_category_change(self, category: str) -> List[Product]:
        self.category = category or ""
        return await self.filters.render(self.category, self.keyword)

    async def on_search_input(self, keyword: str) -> List[Product]:
        self.keyword = keyword or ""
        return await self.filters.render(self.category, self.keyword)

    def on_product_click(self, product_id) -> Optional[bool]:
        """Toggle a rendered card. Clicks outside any card do nothing."""
        card = self.product_view.card(product_id)
        if card is None:
            return None
        return self.selection.toggle(card.id, card.name, card.brand)

    def on_remove_click(self, product_id) -> None:
        self.selection.remove(product_id)

    # ─── Chat ───

    def _track(self, coro) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def submit_chat(self, text: str) -> asyncio.Task:
        """Schedule a chat send. Each call gets its own task; none are merged."""
        return self._track(self.conversation.send_chat_turn(text))

    def submit_generate(self) -> asyncio.Task:
        return self._track(self.conversation.generate_routine())

    @property
    def pending_tasks(self) -> List[asyncio.Task]:
        return [t for t in self._tasks if not t.done()]

    def cancel_pending(self) -> int:
        """Cancel every outstanding request. Returns how many were cancelled."""
        tasks = self.pending_tasks
        for task in tasks:
            task.cancel()
        if tasks:
            logger.info(f"Controller | cancelled {len(tasks)} pending request(s)")
        return len(tasks)

    async def wait_pending(self) -> list:
        return await asyncio.gather(*self.pending_tasks, return_exceptions=True)


def build_advisor() -> RoutineAdvisor:
    """Advisor wired from app_config: catalog file/URL, local storage file, relay URL."""
    advisor = RoutineAdvisor(
        catalog=CatalogProvider(CATALOG_SOURCE),
        storage=LocalStorage(STORAGE_PATH),
        relay=RelayClient(RELAY_URL, timeout=RELAY_TIMEOUT_SECONDS),
    )
    advisor.start()
    return advisor
