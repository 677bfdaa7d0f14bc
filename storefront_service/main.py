"""
main.py — FastAPI Entry Point for the Storefront Service

This module provides the REST API of the storefront. It wires the entity store,
the catalog and order services and the access gate together and exposes them
as JSON endpoints.

Responsibilities:
    • Catalog browsing and admin product management
    • Guest checkout and admin order management
    • Mock login with signed bearer tokens
    • Mapping service errors to HTTP status codes
    • Provide system health information
"""

import logging
from typing import List, Optional

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from . import config
from .auth import AccessGate
from .catalog import CatalogService
from .errors import AuthorizationError, CheckoutError, NotFoundError, StorefrontError
from .logging_config import setup_logging
from .models import (
    CreateOrderCommand,
    CreateProductCommand,
    CreateUserCommand,
    LoginRequest,
    LoginResponse,
    Order,
    OrderWithItems,
    Product,
    UpdateOrderStatusCommand,
    UpdateProductCommand,
    User,
    UserOut,
)
from .seed import seed_store
from .storage import MemStorage, StorageBackend
from .workflow import OrderService

log = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


# Dependencies

def get_gate(request: Request) -> AccessGate:
    return request.app.state.gate


def get_catalog(request: Request) -> CatalogService:
    return request.app.state.catalog


def get_orders_service(request: Request) -> OrderService:
    return request.app.state.orders


def bearer_token(credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)) -> Optional[str]:
    return credentials.credentials if credentials else None


def current_user(token: Optional[str] = Depends(bearer_token), gate: AccessGate = Depends(get_gate)) -> User:
    return gate.require(token)


def admin_user(token: Optional[str] = Depends(bearer_token), gate: AccessGate = Depends(get_gate)) -> User:
    return gate.require(token, role="admin")


def create_app(storage: StorageBackend = None, seed: bool = None, stock_policy=None, status_policy=None) -> FastAPI:
    """
    Builds the FastAPI application around a storage backend.

    Args:
        storage (StorageBackend | None): Entity store; a fresh `MemStorage` if omitted.
        seed (bool | None): Load the admin account and demo catalog. Defaults to `config.SEED_DATA`.
        stock_policy, status_policy: Passed through to `OrderService`.

    Returns:
        FastAPI: The configured application. Services are available on `app.state`.
    """
    storage = storage if storage is not None else MemStorage()
    seed = config.SEED_DATA if seed is None else seed

    app = FastAPI(title="Storefront API")
    app.state.storage = storage
    app.state.gate = AccessGate(storage)
    app.state.catalog = CatalogService(storage)
    app.state.orders = OrderService(storage, stock_policy=stock_policy, status_policy=status_policy)

    if seed:
        seed_store(app.state.gate, app.state.catalog)

    @app.exception_handler(StorefrontError)
    async def handle_storefront_error(request: Request, exc: StorefrontError):
        return JSONResponse(status_code=exc.status_code, content={"message": exc.message})

    register_routes(app)
    log.info(
        f"Storefront service ready (stock policy: {app.state.orders.stock_policy.value}, "
        f"status policy: {app.state.orders.status_policy.value})."
    )
    return app


def register_routes(app: FastAPI):

    # Authentication

    @app.post("/api/auth/login", response_model=LoginResponse)
    def login(credentials: LoginRequest, gate: AccessGate = Depends(get_gate)):
        user = gate.authenticate(credentials.email, credentials.password)
        if user is None:
            raise AuthorizationError("Invalid credentials")
        return LoginResponse(user=UserOut.from_user(user), token=gate.issue_token(user))

    @app.post("/api/auth/register", response_model=UserOut, status_code=201)
    def register(command: CreateUserCommand, gate: AccessGate = Depends(get_gate)):
        return UserOut.from_user(gate.register(command))

    @app.post("/api/auth/logout")
    def logout():
        # Tokens are stateless; the client simply discards its token.
        return {"message": "Logged out"}

    @app.get("/api/auth/me", response_model=UserOut)
    def me(user: User = Depends(current_user)):
        return UserOut.from_user(user)

    # Catalog

    @app.get("/api/products", response_model=List[Product])
    def list_products(catalog: CatalogService = Depends(get_catalog)):
        return catalog.list_active()

    @app.get("/api/products/{product_id}", response_model=Product)
    def get_product(product_id: str, catalog: CatalogService = Depends(get_catalog)):
        return catalog.require(product_id)

    @app.post("/api/products", response_model=Product, status_code=201)
    def create_product(
            command: CreateProductCommand,
            admin: User = Depends(admin_user),
            catalog: CatalogService = Depends(get_catalog)
    ):
        return catalog.create(command)

    @app.put("/api/products/{product_id}", response_model=Product)
    def update_product(
            product_id: str,
            command: UpdateProductCommand,
            admin: User = Depends(admin_user),
            catalog: CatalogService = Depends(get_catalog)
    ):
        product = catalog.update(product_id, command)
        if product is None:
            raise NotFoundError(f"Product {product_id} not found")
        return product

    @app.delete("/api/products/{product_id}")
    def delete_product(
            product_id: str,
            admin: User = Depends(admin_user),
            catalog: CatalogService = Depends(get_catalog)
    ):
        if not catalog.delete(product_id):
            raise NotFoundError(f"Product {product_id} not found")
        return {"message": "Product deleted"}

    # Orders

    @app.get("/api/orders", response_model=List[OrderWithItems])
    def list_orders(user: User = Depends(current_user), orders: OrderService = Depends(get_orders_service)):
        if user.role == "admin":
            return orders.get_orders()
        return orders.get_user_orders(user.id)

    @app.get("/api/orders/{order_id}", response_model=OrderWithItems)
    def get_order(
            order_id: str,
            admin: User = Depends(admin_user),
            orders: OrderService = Depends(get_orders_service)
    ):
        order = orders.get_order(order_id)
        if order is None:
            raise NotFoundError(f"Order {order_id} not found")
        return order

    @app.post("/api/orders", response_model=OrderWithItems, status_code=201)
    def submit_order(command: CreateOrderCommand, orders: OrderService = Depends(get_orders_service)):
        """
        Guest checkout.

        Returns 201 with the order composite, 400 for an empty cart (or an
        out-of-stock product under the `reject` stock policy), and 500 if the
        order could not be stored.
        """
        try:
            return orders.create_order(command)
        except StorefrontError:
            raise
        except Exception as e:
            log.critical(f"Critical error while creating order for {command.customerEmail}: {e}", exc_info=True)
            raise CheckoutError("Internal server error while creating order.") from e

    @app.put("/api/orders/{order_id}/status", response_model=Order)
    def update_order_status(
            order_id: str,
            command: UpdateOrderStatusCommand,
            admin: User = Depends(admin_user),
            orders: OrderService = Depends(get_orders_service)
    ):
        order = orders.update_order_status(order_id, command.status)
        if order is None:
            raise NotFoundError(f"Order {order_id} not found")
        return order

    # Health Check Endpoint
    @app.get("/health")
    def health_check():
        """
        Simple health check endpoint for monitoring systems and container orchestrators.
        """
        return {"status": "ok"}


setup_logging()
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=config.PORT)
