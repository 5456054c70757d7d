"""Tests for the Product aggregate: creation, pricing and the variant matrix."""

import pytest
from protean.exceptions import ValidationError
from storefront.exceptions import NotFoundError
from storefront.product.events import ProductCreated, VariantAdded
from storefront.product.product import Product, slugify


class TestSlugify:
    def test_lowercases_and_dashes_whitespace(self):
        assert slugify("Classic  Crew Neck Tee") == "classic-crew-neck-tee"

    def test_drops_punctuation_and_collapses_dashes(self):
        assert slugify("Men's -- Slim Fit (Blue)!") == "mens-slim-fit-blue"


class TestProductCreation:
    def test_create_uppercases_sku_and_derives_slug(self):
        product = Product.create(
            sku="tee-042",
            name="Relaxed Linen Shirt",
            description="Breathable linen for summer.",
            category="men-shirts",
            brand="Acme",
            base_price=40.0,
        )
        assert product.sku == "TEE-042"
        assert product.slug == "relaxed-linen-shirt"
        assert product.is_active is True
        assert product.rating_average == 0.0
        assert product.rating_count == 0

    def test_create_raises_product_created(self):
        product = Product.create(
            sku="TEE-043",
            name="Linen Shirt",
            description="Breathable linen.",
            category="men-shirts",
            brand="Acme",
            base_price=40.0,
        )
        assert len(product._events) == 1
        assert isinstance(product._events[0], ProductCreated)
        assert product._events[0].sku == "TEE-043"

    def test_sku_with_invalid_characters_is_rejected(self):
        with pytest.raises(ValidationError) as exc:
            Product.create(
                sku="TEE 042!",
                name="Linen Shirt",
                description="Breathable linen.",
                category="men-shirts",
                brand="Acme",
                base_price=40.0,
            )
        assert "sku" in exc.value.messages

    def test_negative_base_price_is_rejected(self, make_product):
        with pytest.raises(ValidationError):
            make_product(base_price=-1.0)

    def test_unknown_category_is_rejected(self):
        with pytest.raises(ValidationError):
            Product.create(
                sku="TEE-044",
                name="Mystery",
                description="Unknown category.",
                category="gadgets",
                brand="Acme",
                base_price=10.0,
            )

    def test_sale_price_must_be_below_base_price(self, make_product):
        with pytest.raises(ValidationError) as exc:
            make_product(base_price=20.0, sale_price=20.0)
        assert "sale_price" in exc.value.messages


class TestPricing:
    def test_current_price_is_base_without_sale(self, product):
        assert product.current_price == 25.0
        assert product.discount_percentage == 0

    def test_current_price_is_sale_price_when_on_sale(self, make_product):
        product = make_product(base_price=40.0, sale_price=30.0)
        assert product.current_price == 30.0
        assert product.discount_percentage == 25

    def test_effective_price_adds_size_adjustment(self, product):
        assert product.effective_price("Black", "L") == 27.0
        assert product.effective_price("black", "M") == 25.0

    def test_effective_price_for_unknown_size(self, product):
        with pytest.raises(NotFoundError):
            product.effective_price("Black", "XXL")


class TestVariantMatrix:
    def test_total_stock_sums_every_entry(self, product):
        assert product.total_stock == 5 + 10 + 0 + 3

    def test_available_sizes_skip_empty_entries(self, product):
        sizes = product.get_available_sizes("Black")
        assert [s["size"] for s in sizes] == ["S", "M"]
        assert sizes[0]["price"] == 25.0

    def test_available_sizes_of_unknown_color(self, product):
        assert product.get_available_sizes("Purple") == []

    def test_is_available_needs_stock_and_activity(self, product):
        assert product.is_available is True
        product.deactivate()
        assert product.is_available is False

    def test_add_variant_raises_event(self, product):
        product.add_variant("Navy", sizes=[{"size": "XL", "stock": 4}])
        event = product._events[-1]
        assert isinstance(event, VariantAdded)
        assert event.sizes == ["XL"]
        assert product.get_stock("Navy", "XL") == 4

    def test_duplicate_color_is_rejected_case_insensitively(self, product):
        with pytest.raises(ValidationError):
            product.add_variant("BLACK")

    def test_duplicate_size_for_color_is_rejected(self, product):
        with pytest.raises(ValidationError):
            product.add_size("Black", "M", stock=1)

    def test_add_size_to_unknown_color(self, product):
        with pytest.raises(NotFoundError):
            product.add_size("Purple", "M", stock=1)

    def test_unknown_size_label_is_rejected(self, product):
        with pytest.raises(ValidationError):
            product.add_size("White", "XXXL", stock=1)


class TestImages:
    def test_primary_image_defaults_to_first(self, product):
        assert product.primary_image is None
        product.add_image("https://cdn.example.com/a.jpg")
        product.add_image("https://cdn.example.com/b.jpg")
        assert product.primary_image.url == "https://cdn.example.com/a.jpg"

    def test_new_primary_image_replaces_the_old_one(self, product):
        product.add_image("https://cdn.example.com/a.jpg", is_primary=True)
        product.add_image("https://cdn.example.com/b.jpg", is_primary=True)
        assert len([i for i in product.images if i.is_primary]) == 1
        assert product.primary_image.url == "https://cdn.example.com/b.jpg"


class TestDetails:
    def test_update_details_keeps_sku_and_slug(self, product):
        product.update_details(name="Renamed Tee", base_price=30.0)
        assert product.name == "Renamed Tee"
        assert product.base_price == 30.0
        assert product.slug == "classic-tee"
        assert product.sku == "TEE-001"

    def test_sale_price_can_be_set_and_cleared(self, product):
        product.update_details(sale_price=20.0)
        assert product.current_price == 20.0
        product.update_details(sale_price=None)
        assert product.sale_price is None

    def test_update_rejects_sale_above_new_base(self, product):
        with pytest.raises(ValidationError):
            product.update_details(base_price=15.0, sale_price=18.0)

    def test_deactivate_twice(self, product):
        product.deactivate()
        with pytest.raises(ValidationError):
            product.deactivate()
