"""
workflow.py — Checkout and Order Administration Logic

This module contains the order workflow of the storefront: composing an order
from the submitted cart, snapshotting unit prices, decrementing stock of
physical goods, and the read-side composition of orders with their items.

Checkout Overview:
1. Validate the cart (non-empty, positive quantities)
2. Stage the order header, its items and the resulting product stock levels
3. Commit all staged writes in one pass under the store lock
4. On a failed commit, compensate the writes already applied and re-raise
5. Return the order composite with current product snapshots
"""

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Dict, List, Optional, Union

from . import config
from .errors import InvalidTransitionError, OutOfStockError, ValidationError
from .models import (
    CreateOrderCommand,
    Order,
    OrderItem,
    OrderItemWithProduct,
    OrderStatus,
    OrderWithItems,
    Product,
    parse_command,
    utcnow,
)
from .storage import EntityKind, StorageBackend

log = logging.getLogger(__name__)


class StockPolicy(str, Enum):
    ALLOW_NEGATIVE = "allow_negative"  # back-order: stock may drop below zero
    REJECT = "reject"


class StatusPolicy(str, Enum):
    PERMISSIVE = "permissive"  # any string, any transition
    STRICT = "strict"


STATUS_TRANSITIONS = {
    OrderStatus.PENDING.value: {OrderStatus.CONFIRMED.value},
    OrderStatus.CONFIRMED.value: {OrderStatus.SHIPPED.value},
    OrderStatus.SHIPPED.value: {OrderStatus.DELIVERED.value},
    OrderStatus.DELIVERED.value: set(),
}


@dataclass
class _StagedOrder:
    order: Order
    items: List[OrderItem]
    # Products as read before checkout, and their post-checkout versions
    originals: Dict[str, Product] = field(default_factory=dict)
    updates: Dict[str, Product] = field(default_factory=dict)


class OrderService:
    """
    Order workflow over a `StorageBackend`.

    Args:
        storage (StorageBackend): Entity store holding products, orders and items.
        stock_policy (StockPolicy | str | None): What to do when a checkout would
            take physical stock below zero. Defaults to `config.STOCK_POLICY`.
        status_policy (StatusPolicy | str | None): Whether status updates follow
            the order lifecycle. Defaults to `config.STATUS_POLICY`.
    """

    def __init__(self, storage: StorageBackend, stock_policy=None, status_policy=None):
        self.storage = storage
        self.stock_policy = StockPolicy(stock_policy or config.STOCK_POLICY)
        self.status_policy = StatusPolicy(status_policy or config.STATUS_POLICY)

    # --- Checkout ---

    def create_order(self, command: Union[CreateOrderCommand, dict]) -> OrderWithItems:
        """
        Executes the checkout workflow for a single guest order.

        Unit prices are taken verbatim from the submitted items and are not
        recomputed from the catalog; a mismatch with the current catalog price
        is only logged. Items pointing at unknown products are stored but left
        out of the returned composite.

        Args:
            command (CreateOrderCommand | dict): Customer data, total and items.

        Returns:
            OrderWithItems: The stored order with its items and the products as
            they are after the stock decrement.

        Raises:
            ValidationError: Empty cart or non-positive quantity.
            OutOfStockError: Under the `reject` policy, if a physical product
                does not have enough stock. Nothing is written in that case.
        """
        command = parse_command(CreateOrderCommand, command, "order")

        if not command.items:
            raise ValidationError("An order must contain at least one item")
        for item in command.items:
            if item.quantity <= 0:
                raise ValidationError(f"Invalid quantity {item.quantity} for product {item.productId}")

        with self.storage.locked():
            staged = self._stage(command)
            self._commit(staged)

        log.info(
            f"[Order: {staged.order.id}] Checkout completed: {len(staged.items)} item(s), "
            f"total {staged.order.total}, {len(staged.updates)} stock update(s)."
        )
        products = {**staged.originals, **staged.updates}
        return self._compose(staged.order, staged.items, products)

    def _stage(self, command: CreateOrderCommand) -> _StagedOrder:
        order_id = self.storage.new_id()
        log_prefix = f"[Order: {order_id}]"

        order = Order(
            id=order_id,
            userId=None,
            customerName=command.customerName,
            customerEmail=command.customerEmail,
            customerPhone=command.customerPhone,
            shippingAddress=command.shippingAddress,
            total=command.total,
            status=command.status or OrderStatus.PENDING.value,
            createdAt=utcnow(),
        )
        staged = _StagedOrder(order=order, items=[])

        requested: Dict[str, int] = {}
        for line in command.items:
            staged.items.append(OrderItem(
                id=self.storage.new_id(),
                orderId=order_id,
                productId=line.productId,
                quantity=line.quantity,
                price=line.price,
            ))
            requested[line.productId] = requested.get(line.productId, 0) + line.quantity

            product = staged.originals.get(line.productId) or self.storage.get(EntityKind.PRODUCT, line.productId)
            if product is None:
                log.warning(f"{log_prefix} Item references unknown product {line.productId}.")
                continue
            staged.originals[product.id] = product
            if Decimal(line.price) != Decimal(product.price):
                log.warning(
                    f"{log_prefix} Submitted price {line.price} for product {product.id} "
                    f"differs from catalog price {product.price}; keeping submitted price."
                )

        for product_id, quantity in requested.items():
            product = staged.originals.get(product_id)
            if product is None or product.type != "physical" or product.stock is None:
                continue
            remaining = product.stock - quantity
            if remaining < 0:
                if self.stock_policy == StockPolicy.REJECT:
                    log.warning(f"{log_prefix} Rejected: product {product_id} has {product.stock}, requested {quantity}.")
                    raise OutOfStockError(product_id, product.stock, quantity)
                log.warning(f"{log_prefix} Product {product_id} back-ordered, stock will be {remaining}.")
            staged.updates[product_id] = product.model_copy(update={"stock": remaining})

        return staged

    def _commit(self, staged: _StagedOrder):
        log_prefix = f"[Order: {staged.order.id}]"
        written_items = []
        written_products = []
        order_written = False
        try:
            self.storage.put(EntityKind.ORDER, staged.order)
            order_written = True
            for item in staged.items:
                self.storage.put(EntityKind.ORDER_ITEM, item)
                written_items.append(item.id)
            for product_id, product in staged.updates.items():
                self.storage.put(EntityKind.PRODUCT, product)
                written_products.append(product_id)
        except Exception as e:
            log.error(f"{log_prefix} Commit failed ({e}). Starting compensation.")
            try:
                for product_id in written_products:
                    self.storage.put(EntityKind.PRODUCT, staged.originals[product_id])
                for item_id in written_items:
                    self.storage.delete(EntityKind.ORDER_ITEM, item_id)
                if order_written:
                    self.storage.delete(EntityKind.ORDER, staged.order.id)
                log.info(f"{log_prefix} Compensation completed.")
            except Exception as comp_e:
                log.critical(f"{log_prefix} CRITICAL: compensation failed, manual cleanup required! {comp_e}")
            raise

    # --- Reads ---

    def _compose(self, order: Order, items: List[OrderItem], products: Dict[str, Product]) -> OrderWithItems:
        composed = [
            OrderItemWithProduct(**item.model_dump(), product=products[item.productId])
            for item in items
            if item.productId in products
        ]
        return OrderWithItems(**order.model_dump(), items=composed)

    def _populate(self, orders: List[Order]) -> List[OrderWithItems]:
        products = {p.id: p for p in self.storage.scan(EntityKind.PRODUCT)}
        items_by_order: Dict[str, List[OrderItem]] = {}
        for item in self.storage.scan(EntityKind.ORDER_ITEM):
            items_by_order.setdefault(item.orderId, []).append(item)
        return [self._compose(o, items_by_order.get(o.id, []), products) for o in orders]

    def get_orders(self) -> List[OrderWithItems]:
        orders = sorted(self.storage.scan(EntityKind.ORDER), key=lambda o: o.createdAt, reverse=True)
        return self._populate(orders)

    def get_user_orders(self, user_id: str) -> List[OrderWithItems]:
        # Checkout is guest-only, so no stored order carries a user id yet.
        orders = [o for o in self.storage.scan(EntityKind.ORDER) if o.userId == user_id]
        return self._populate(orders)

    def get_order(self, order_id: str) -> Optional[OrderWithItems]:
        order = self.storage.get(EntityKind.ORDER, order_id)
        if order is None:
            return None
        return self._populate([order])[0]

    # --- Administration ---

    def update_order_status(self, order_id: str, status: str) -> Optional[Order]:
        """
        Overwrites the status of an order.

        Under the `permissive` policy any string is stored. Under `strict`, only
        the lifecycle pending → confirmed → shipped → delivered is allowed;
        re-applying the current status is a no-op.

        Returns:
            Order | None: The updated order, or None if the id is unknown.

        Raises:
            ValidationError: Unknown status value under the `strict` policy.
            InvalidTransitionError: Disallowed transition under the `strict` policy.
        """
        log_prefix = f"[Order: {order_id}]"
        with self.storage.locked():
            order = self.storage.get(EntityKind.ORDER, order_id)
            if order is None:
                log.warning(f"{log_prefix} Status update for unknown order.")
                return None
            self._check_transition(order, status)
            updated = order.model_copy(update={"status": status})
            self.storage.put(EntityKind.ORDER, updated)
        log.info(f"{log_prefix} Status changed: {order.status} -> {status}.")
        return updated

    def _check_transition(self, order: Order, status: str):
        if status not in STATUS_TRANSITIONS:
            if self.status_policy == StatusPolicy.STRICT:
                raise ValidationError(f"Unknown order status '{status}'")
            log.warning(f"[Order: {order.id}] Storing non-standard status '{status}'.")
            return
        if self.status_policy == StatusPolicy.PERMISSIVE or status == order.status:
            return
        if status not in STATUS_TRANSITIONS.get(order.status, set()):
            raise InvalidTransitionError(order.status, status)
