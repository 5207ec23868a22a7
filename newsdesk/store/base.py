from __future__ import annotations

import abc
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional, Sequence

from newsdesk.core.errors import ConflictError

BATCH_WRITE_LIMIT = 25

Item = dict[str, Any]
Key = dict[str, Any]


class ItemExistsError(ConflictError):
    default_message = "Item already exists"


@dataclass(frozen=True)
class Condition:
    attr: str
    op: str
    value: Any

    def matches(self, item: Item) -> bool:
        actual = item.get(self.attr)
        if self.op == "eq":
            return actual == self.value
        if self.op == "contains":
            if isinstance(actual, (list, tuple, set)):
                return self.value in actual
            if isinstance(actual, str):
                return isinstance(self.value, str) and self.value in actual
            return False
        raise ValueError(f"Unsupported condition operator: {self.op}")


def eq(attr: str, value: Any) -> Condition:
    return Condition(attr, "eq", value)


def contains(attr: str, value: Any) -> Condition:
    return Condition(attr, "contains", value)


def matches_all(item: Item, conditions: Iterable[Condition]) -> bool:
    return all(c.matches(item) for c in conditions)


@dataclass
class Page:
    items: list[Item] = field(default_factory=list)
    last_key: Optional[Key] = None

    @property
    def has_more(self) -> bool:
        return self.last_key is not None


def chunked(items: Sequence[Item], size: int = BATCH_WRITE_LIMIT) -> list[Sequence[Item]]:
    return [items[i:i + size] for i in range(0, len(items), size)]


class DocumentStore(abc.ABC):
    """Async get/put/delete/scan/query access to named tables of JSON documents.

    Items are keyed by their ``id`` attribute. ``limit`` on scan/query bounds
    the number of items evaluated, not the number returned: conditions are
    applied to the evaluated items, and ``Page.last_key`` is set whenever
    evaluation stopped because of the limit. Pass it back as ``start_key``
    to continue.
    """

    @abc.abstractmethod
    async def get(self, table: str, item_id: str) -> Optional[Item]: ...

    @abc.abstractmethod
    async def put(self, table: str, item: Item, if_not_exists: bool = False) -> None: ...

    @abc.abstractmethod
    async def delete(self, table: str, item_id: str) -> bool: ...

    @abc.abstractmethod
    async def increment(self, table: str, item_id: str, field_name: str, amount: int = 1) -> int: ...

    @abc.abstractmethod
    async def scan(
        self,
        table: str,
        conditions: Sequence[Condition] = (),
        limit: Optional[int] = None,
        start_key: Optional[Key] = None,
    ) -> Page: ...

    @abc.abstractmethod
    async def query(
        self,
        table: str,
        index: str,
        key_attr: str,
        key_value: Any,
        conditions: Sequence[Condition] = (),
        limit: Optional[int] = None,
        start_key: Optional[Key] = None,
    ) -> Page: ...

    @abc.abstractmethod
    async def batch_put(self, table: str, items: Sequence[Item]) -> list[Item]:
        """Write items in chunks of 25 and return any unprocessed items."""

    async def create_schema(self) -> None:
        return None

    async def close(self) -> None:
        return None
