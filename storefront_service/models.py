"""
models.py — Entities and Command Models for the Storefront

This module defines the stored entities (users, products, orders, order items)
and the typed command payloads accepted by the services. Pydantic validates
every command before it reaches a service, and field names follow the camelCase
JSON contract used by the storefront client.

Models:
    - User / UserOut: Account record and its password-free public view.
    - Product: Catalog entry; `stock` is only meaningful for physical goods.
    - Order / OrderItem: Checkout header and its price-snapshot line items.
    - OrderWithItems: An order joined with its items and current products.
    - *Command / *Request: Inbound payloads per operation.
"""

from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Annotated, List, Literal, Optional

import pydantic
from pydantic import AfterValidator, BaseModel, EmailStr, Field

from .errors import ValidationError

ProductType = Literal["physical", "digital"]
Role = Literal["user", "admin"]


class OrderStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    SHIPPED = "shipped"
    DELIVERED = "delivered"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def check_decimal(value: Optional[str]) -> Optional[str]:
    """Accepts a non-negative decimal string and returns it unchanged."""
    if value is None:
        return value
    try:
        amount = Decimal(value)
    except InvalidOperation:
        raise ValueError(f"'{value}' is not a decimal amount")
    if not amount.is_finite() or amount < 0:
        raise ValueError(f"'{value}' is not a non-negative amount")
    return value


DecimalStr = Annotated[str, AfterValidator(check_decimal)]


def parse_command(model, payload, what="request"):
    """
    Returns `payload` as an instance of the command `model`, validating dicts.

    Raises:
        ValidationError: If the payload does not validate.
    """
    if isinstance(payload, model):
        return payload
    try:
        return model.model_validate(payload)
    except pydantic.ValidationError as e:
        raise ValidationError(f"Invalid {what} data: {e.errors(include_url=False)}")


# --- Entities ---

class User(BaseModel):
    id: str
    email: str
    password: str  # plaintext, mock authentication only
    name: str
    role: Role = "user"
    createdAt: datetime


class UserOut(BaseModel):
    id: str
    email: str
    name: str
    role: Role

    @classmethod
    def from_user(cls, user: User) -> "UserOut":
        return cls(id=user.id, email=user.email, name=user.name, role=user.role)


class Product(BaseModel):
    """
    A catalog entry.

    Attributes:
        price (str): Decimal amount kept as a string to avoid float rounding.
        type (str): 'physical' or 'digital'. Digital products always carry `stock=None`.
        stock (int | None): Remaining units of a physical product; may go negative
            under the `allow_negative` stock policy.
        isActive (bool): Inactive products are hidden from listings only.
    """
    id: str
    name: str
    description: str
    price: str
    imageUrl: str
    type: ProductType
    ageRange: str
    category: str
    stock: Optional[int] = None
    isActive: bool = True
    createdAt: datetime


class Order(BaseModel):
    id: str
    userId: Optional[str] = None
    customerName: str
    customerEmail: str
    customerPhone: str
    shippingAddress: str
    total: str
    status: str = OrderStatus.PENDING.value
    createdAt: datetime


class OrderItem(BaseModel):
    """A line of an order; `price` is the unit price captured at checkout."""
    id: str
    orderId: str
    productId: str
    quantity: int
    price: str


class OrderItemWithProduct(OrderItem):
    product: Product


class OrderWithItems(Order):
    items: List[OrderItemWithProduct] = []


# --- Commands ---

class CreateProductCommand(BaseModel):
    name: str = Field(..., min_length=1)
    description: str
    price: DecimalStr
    imageUrl: str
    type: ProductType
    ageRange: str
    category: str
    stock: Optional[int] = None
    isActive: bool = True


class UpdateProductCommand(BaseModel):
    """Partial product update; only the fields that were sent are merged."""
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    price: Optional[DecimalStr] = None
    imageUrl: Optional[str] = None
    type: Optional[ProductType] = None
    ageRange: Optional[str] = None
    category: Optional[str] = None
    stock: Optional[int] = None
    isActive: Optional[bool] = None

    def changes(self) -> dict:
        """
        Returns the fields explicitly provided by the caller. An explicit null
        is kept only for `stock`, the one nullable product field.
        """
        provided = self.model_dump(exclude_unset=True)
        return {k: v for k, v in provided.items() if v is not None or k == "stock"}


class OrderItemInput(BaseModel):
    """
    A line item submitted at checkout.

    Attributes:
        productId (str): Catalog id of the product.
        quantity (int): Units ordered. Must be greater than zero.
        price (str): Unit price as seen by the customer; stored verbatim.
    """
    productId: str
    quantity: int = Field(..., gt=0)
    price: DecimalStr


class CreateOrderCommand(BaseModel):
    """
    A guest checkout request.

    The emptiness of `items` is checked by the order workflow rather than here,
    so that an empty cart is rejected with the service's own ValidationError.
    """
    customerName: str = Field(..., min_length=1)
    customerEmail: EmailStr
    customerPhone: str
    shippingAddress: str = Field(..., min_length=1)
    total: DecimalStr
    status: Optional[str] = None
    items: List[OrderItemInput]


class UpdateOrderStatusCommand(BaseModel):
    status: str = Field(..., min_length=1)


class CreateUserCommand(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    role: Role = "user"


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class LoginResponse(BaseModel):
    user: UserOut
    token: str
