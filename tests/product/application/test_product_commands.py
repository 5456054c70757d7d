"""Application tests for product creation and maintenance commands."""

import pytest
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain
from storefront.exceptions import DuplicateError, NotFoundError
from storefront.product.creation import CreateProduct
from storefront.product.management import (
    ActivateProduct,
    AddProductImage,
    AddSize,
    AddVariant,
    DeactivateProduct,
    RecordProductView,
    UpdateProductDetails,
)
from storefront.product.product import Product


def _create_product(**overrides):
    defaults = {
        "sku": "tee-100",
        "name": "Everyday Tee",
        "description": "Soft cotton tee for every day.",
        "category": "men-shirts",
        "brand": "Acme",
        "base_price": 20.0,
        "variants": [{"color": "Red", "sizes": [{"size": "M", "stock": 4}]}],
    }
    defaults.update(overrides)
    return current_domain.process(CreateProduct(**defaults), asynchronous=False)


def _get(product_id):
    return current_domain.repository_for(Product).get(product_id)


class TestCreateProductHandler:
    def test_creates_product_with_variants(self):
        product = _get(_create_product())
        assert product.sku == "TEE-100"
        assert product.slug == "everyday-tee"
        assert product.get_stock("Red", "M") == 4

    def test_full_payload(self):
        product_id = _create_product(
            sku="JKT-001",
            name="Rain Jacket",
            category="women-jackets",
            gender="women",
            sale_price=15.0,
            tags=["Outdoor", "RAIN"],
            materials=["nylon"],
            weight={"value": 0.8, "unit": "kg"},
            dimensions={"length": 30, "width": 20, "height": 5, "unit": "cm"},
            images=[{"url": "https://cdn.example.com/jacket.jpg", "is_primary": True}],
        )
        product = _get(product_id)
        assert product.tags == ["outdoor", "rain"]
        assert product.weight.value == 0.8
        assert product.dimensions.unit == "cm"
        assert product.primary_image.url == "https://cdn.example.com/jacket.jpg"
        assert product.current_price == 15.0

    def test_slug_collisions_get_numbered(self):
        first = _get(_create_product(sku="A-1"))
        second = _get(_create_product(sku="A-2"))
        third = _get(_create_product(sku="A-3"))
        assert [first.slug, second.slug, third.slug] == ["everyday-tee", "everyday-tee-2", "everyday-tee-3"]

    def test_duplicate_sku_is_rejected(self):
        _create_product(sku="DUP-1")
        with pytest.raises(DuplicateError):
            _create_product(sku="dup-1", name="Other name")

    def test_explicit_taken_slug_is_rejected(self):
        _create_product(sku="S-1", slug="my-tee")
        with pytest.raises(DuplicateError):
            _create_product(sku="S-2", slug="my-tee")

    def test_invalid_weight_unit(self):
        with pytest.raises(ValidationError):
            _create_product(weight={"value": 1, "unit": "stone"})


class TestManageProductHandler:
    def test_update_details(self):
        product_id = _create_product()
        current_domain.process(
            UpdateProductDetails(product_id=product_id, name="Better Tee", sale_price=18.0),
            asynchronous=False,
        )
        product = _get(product_id)
        assert product.name == "Better Tee"
        assert product.sale_price == 18.0
        assert product.slug == "everyday-tee"

    def test_clear_sale_price(self):
        product_id = _create_product(sale_price=15.0)
        current_domain.process(
            UpdateProductDetails(product_id=product_id, clear_sale_price=True),
            asynchronous=False,
        )
        assert _get(product_id).sale_price is None

    def test_add_variant_and_size(self):
        product_id = _create_product()
        current_domain.process(
            AddVariant(product_id=product_id, color="Blue", sizes=[{"size": "S", "stock": 2}]),
            asynchronous=False,
        )
        current_domain.process(
            AddSize(product_id=product_id, color="Blue", size="L", stock=6, price_adjustment=1.5),
            asynchronous=False,
        )
        product = _get(product_id)
        assert product.get_stock("Blue", "S") == 2
        assert product.effective_price("Blue", "L") == 21.5

    def test_add_image(self):
        product_id = _create_product()
        current_domain.process(
            AddProductImage(product_id=product_id, url="https://cdn.example.com/tee.jpg", alt="Tee"),
            asynchronous=False,
        )
        assert _get(product_id).primary_image.alt == "Tee"

    def test_deactivate_and_activate(self):
        product_id = _create_product()
        current_domain.process(DeactivateProduct(product_id=product_id), asynchronous=False)
        assert _get(product_id).is_active is False
        current_domain.process(ActivateProduct(product_id=product_id), asynchronous=False)
        assert _get(product_id).is_active is True

    def test_record_view(self):
        product_id = _create_product()
        current_domain.process(RecordProductView(product_id=product_id), asynchronous=False)
        current_domain.process(RecordProductView(product_id=product_id), asynchronous=False)
        assert _get(product_id).view_count == 2

    def test_unknown_product(self):
        with pytest.raises(NotFoundError):
            current_domain.process(DeactivateProduct(product_id="missing"), asynchronous=False)
