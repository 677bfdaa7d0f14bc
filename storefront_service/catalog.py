"""
catalog.py — Catalog Service

CRUD over products. Listing only shows active products; inactive ones stay
reachable by id so existing orders can still display them.
"""

import logging
from typing import List, Optional, Union

from .errors import NotFoundError
from .models import CreateProductCommand, Product, UpdateProductCommand, parse_command, utcnow
from .storage import EntityKind, StorageBackend

log = logging.getLogger(__name__)


def _normalize_stock(product: Product) -> Product:
    # Digital goods are never stock-tracked.
    if product.type == "digital" and product.stock is not None:
        return product.model_copy(update={"stock": None})
    return product


class CatalogService:

    def __init__(self, storage: StorageBackend):
        self.storage = storage

    def list_active(self) -> List[Product]:
        return [p for p in self.storage.scan(EntityKind.PRODUCT) if p.isActive]

    def get_by_id(self, product_id: str) -> Optional[Product]:
        return self.storage.get(EntityKind.PRODUCT, product_id)

    def require(self, product_id: str) -> Product:
        product = self.get_by_id(product_id)
        if product is None:
            raise NotFoundError(f"Product {product_id} not found")
        return product

    def create(self, command: Union[CreateProductCommand, dict]) -> Product:
        """
        Adds a product to the catalog.

        Args:
            command (CreateProductCommand | dict): Product fields. Dicts are
                validated first; `stock` defaults to None and `isActive` to True.

        Returns:
            Product: The stored product including its generated id and createdAt.

        Raises:
            ValidationError: If a required field is missing or malformed.
        """
        command = parse_command(CreateProductCommand, command, "product")
        product = _normalize_stock(Product(
            id=self.storage.new_id(),
            createdAt=utcnow(),
            **command.model_dump(),
        ))
        self.storage.put(EntityKind.PRODUCT, product)
        log.info(f"[Product: {product.id}] Created '{product.name}' ({product.type}, stock={product.stock}).")
        return product

    def update(self, product_id: str, command: Union[UpdateProductCommand, dict]) -> Optional[Product]:
        """
        Shallow-merges the provided fields onto an existing product.

        Returns None when the id is unknown; the caller decides whether that is
        a not-found condition.
        """
        command = parse_command(UpdateProductCommand, command, "product")
        changes = command.changes()
        with self.storage.locked():
            existing = self.storage.get(EntityKind.PRODUCT, product_id)
            if existing is None:
                return None
            updated = _normalize_stock(existing.model_copy(update=changes))
            self.storage.put(EntityKind.PRODUCT, updated)
        log.info(f"[Product: {product_id}] Updated fields: {sorted(changes)}.")
        return updated

    def delete(self, product_id: str) -> bool:
        # No cascade: order items keep pointing at the removed id.
        deleted = self.storage.delete(EntityKind.PRODUCT, product_id)
        if deleted:
            log.info(f"[Product: {product_id}] Deleted.")
        return deleted
