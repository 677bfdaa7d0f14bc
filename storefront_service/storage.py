"""
storage.py — Entity Store

Keyed in-memory collections for users, products, orders and order items.

The services only depend on the `StorageBackend` protocol (get / put / delete /
scan per entity kind, id generation and a process lock), so a persistent
backend can be plugged in later without touching the catalog or order code.

Entities are copied on `put` and on every read: callers never hold a reference
to the object stored in the map.
"""

import logging
import threading
import uuid
from contextlib import contextmanager
from enum import Enum
from typing import Dict, Iterator, List, Optional, Protocol

from pydantic import BaseModel

log = logging.getLogger(__name__)


class EntityKind(str, Enum):
    USER = "user"
    PRODUCT = "product"
    ORDER = "order"
    ORDER_ITEM = "order_item"


class StorageBackend(Protocol):
    def new_id(self) -> str: ...

    def get(self, kind: EntityKind, entity_id: str) -> Optional[BaseModel]: ...

    def put(self, kind: EntityKind, entity: BaseModel) -> None: ...

    def delete(self, kind: EntityKind, entity_id: str) -> bool: ...

    def scan(self, kind: EntityKind) -> List[BaseModel]: ...

    def locked(self): ...


class MemStorage:
    """
    In-memory implementation of `StorageBackend`.

    A single re-entrant lock serializes every mutation. Multi-step workflows
    (checkout, product updates) hold it through `locked()` for their whole
    read-modify-write sequence, since entities carry no version to detect
    lost updates.
    """

    def __init__(self):
        self._maps: Dict[EntityKind, Dict[str, BaseModel]] = {kind: {} for kind in EntityKind}
        self._lock = threading.RLock()

    def new_id(self) -> str:
        return str(uuid.uuid4())

    @contextmanager
    def locked(self) -> Iterator[None]:
        with self._lock:
            yield

    def get(self, kind: EntityKind, entity_id: str) -> Optional[BaseModel]:
        entity = self._maps[kind].get(entity_id)
        return entity.model_copy(deep=True) if entity is not None else None

    def put(self, kind: EntityKind, entity: BaseModel) -> None:
        with self._lock:
            self._maps[kind][entity.id] = entity.model_copy(deep=True)

    def delete(self, kind: EntityKind, entity_id: str) -> bool:
        with self._lock:
            return self._maps[kind].pop(entity_id, None) is not None

    def scan(self, kind: EntityKind) -> List[BaseModel]:
        with self._lock:
            entities = list(self._maps[kind].values())
        return [e.model_copy(deep=True) for e in entities]
