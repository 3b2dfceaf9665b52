"""
Pytest configuration and fixtures for Routine Advisor tests.

Provides a sample catalog on disk, in-memory storage, and fake relays:
- ScriptedRelay answers from a queue (dicts are returned, exceptions raised)
- GatedRelay parks every call on a future the test resolves by hand, so
  completion order can be chosen explicitly
"""

import asyncio
import json
import pytest
from typing import Any, Dict, List

from core import MemoryStorage
from services import CatalogProvider, RelayError
from controller import RoutineAdvisor


SAMPLE_PRODUCTS = [
    {
        "id": 1,
        "name": "Cream",
        "brand": "A",
        "category": "moisturizer",
        "description": "Rich daily cream for dry skin",
        "image": "img/cream.jpg",
    },
    {
        "id": 2,
        "name": "Gel",
        "brand": "B",
        "category": "cleanser",
        "description": "Foaming gel cleanser",
        "image": "img/gel.jpg",
    },
    {
        "id": 3,
        "name": "Hydrating Cleanser",
        "brand": "CeraVe",
        "category": "cleanser",
        "description": "Gentle non-foaming wash with ceramides",
        "image": "img/hydrating.jpg",
    },
    {
        "id": 4,
        "name": "Sunscreen SPF 50",
        "brand": "La Roche-Posay",
        "category": "suncare",
        "description": "Lightweight fluid that protects against UVA and UVB",
        "image": "img/spf.jpg",
    },
    {
        "id": 5,
        "name": "Repair Shampoo",
        "brand": "Kerastase",
        "category": "haircare",
        "description": "Strengthening shampoo for damaged hair",
        "image": "img/shampoo.jpg",
    },
]


def completion(content: str) -> Dict[str, Any]:
    """Minimal chat-completions response carrying `content`."""
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


class ScriptedRelay:
    """Relay double that replays queued responses in call order."""

    def __init__(self, responses=None):
        self.responses: List[Any] = list(responses or [])
        self.calls: List[List[Dict[str, str]]] = []

    async def send(self, messages):
        self.calls.append(messages)
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


class GatedRelay:
    """Relay double whose calls finish only when the test resolves them."""

    def __init__(self):
        self.calls: List[List[Dict[str, str]]] = []
        self.waiters: List[asyncio.Future] = []

    async def send(self, messages):
        future = asyncio.get_running_loop().create_future()
        self.calls.append(messages)
        self.waiters.append(future)
        return await future

    def reply(self, index: int, content: str) -> None:
        self.waiters[index].set_result(completion(content))

    def fail(self, index: int, message: str) -> None:
        self.waiters[index].set_exception(RelayError(message))

    async def wait_for_calls(self, count: int) -> None:
        while len(self.calls) < count:
            await asyncio.sleep(0)


@pytest.fixture
def catalog_file(tmp_path):
    path = tmp_path / "products.json"
    path.write_text(json.dumps({"products": SAMPLE_PRODUCTS}), encoding="utf-8")
    return path


@pytest.fixture
def catalog(catalog_file):
    return CatalogProvider(catalog_file)


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def scripted_relay():
    return ScriptedRelay()


@pytest.fixture
def gated_relay():
    return GatedRelay()


@pytest.fixture
def advisor(catalog, storage, scripted_relay):
    """Advisor over the sample catalog with a scripted relay, already started."""
    advisor = RoutineAdvisor(catalog=catalog, storage=storage, relay=scripted_relay)
    advisor.start()
    return advisor
