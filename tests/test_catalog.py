import pytest

from storefront_service.errors import NotFoundError, ValidationError


def test_create_assigns_id_and_defaults(catalog, product_command):
    product = catalog.create(product_command(stock=None, isActive=True))
    assert product.id
    assert product.createdAt is not None
    assert product.stock is None
    assert product.isActive is True


def test_create_accepts_dict_without_optional_fields(catalog, product_command):
    fields = product_command().model_dump(exclude={"stock", "isActive"})
    product = catalog.create(fields)
    assert product.stock is None
    assert product.isActive is True


def test_get_by_id_matches_created_product(catalog, product_command):
    command = product_command()
    product = catalog.create(command)
    fetched = catalog.get_by_id(product.id)
    assert fetched == product
    assert fetched.model_dump(exclude={"id", "createdAt"}) == command.model_dump()


def test_create_rejects_missing_required_field(catalog, product_command):
    fields = product_command().model_dump()
    del fields["name"]
    with pytest.raises(ValidationError):
        catalog.create(fields)
    assert catalog.list_active() == []


def test_create_rejects_non_decimal_price(catalog, product_command):
    fields = product_command().model_dump()
    fields["price"] = "cheap"
    with pytest.raises(ValidationError):
        catalog.create(fields)


def test_digital_products_never_carry_stock(catalog, product_command):
    product = catalog.create(product_command(type="digital", stock=50))
    assert product.stock is None

    physical = catalog.create(product_command(stock=5))
    updated = catalog.update(physical.id, {"type": "digital"})
    assert updated.stock is None


def test_list_active_hides_inactive_products(catalog, product_command):
    visible = catalog.create(product_command(name="Visible"))
    hidden = catalog.create(product_command(name="Hidden", isActive=False))

    listed = {p.id for p in catalog.list_active()}
    assert visible.id in listed
    assert hidden.id not in listed
    assert catalog.get_by_id(hidden.id).name == "Hidden"


def test_deactivating_removes_from_listing_without_deleting(catalog, physical):
    assert [p.id for p in catalog.list_active()] == [physical.id]

    catalog.update(physical.id, {"isActive": False})

    assert catalog.list_active() == []
    assert catalog.get_by_id(physical.id).isActive is False


def test_update_merges_only_provided_fields(catalog, physical):
    updated = catalog.update(physical.id, {"price": "19990", "stock": 3})
    assert updated.price == "19990"
    assert updated.stock == 3
    assert updated.name == physical.name
    assert updated.createdAt == physical.createdAt
    assert catalog.get_by_id(physical.id) == updated


def test_update_can_clear_stock_but_ignores_other_nulls(catalog, physical):
    updated = catalog.update(physical.id, {"stock": None, "name": None})
    assert updated.stock is None
    assert updated.name == physical.name


def test_update_unknown_product_returns_none(catalog):
    assert catalog.update("missing", {"price": "1"}) is None


def test_delete_is_hard(catalog, physical):
    assert catalog.delete(physical.id) is True
    assert catalog.get_by_id(physical.id) is None
    assert catalog.delete(physical.id) is False


def test_require_raises_not_found(catalog):
    with pytest.raises(NotFoundError):
        catalog.require("missing")
