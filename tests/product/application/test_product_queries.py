"""Application tests for catalogue queries."""

import pytest
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain
from storefront.exceptions import NotFoundError
from storefront.product.product import Product


@pytest.fixture()
def catalogue(make_product):
    repo = current_domain.repository_for(Product)
    products = [
        make_product(sku="M-1", name="Oxford Shirt", base_price=45.0, gender="men", tags=["office"]),
        make_product(sku="M-2", name="Denim Jacket", base_price=80.0, gender="men", is_featured=True),
        make_product(
            sku="W-1",
            name="Wrap Dress",
            base_price=60.0,
            gender="women",
            brand="Lumen",
            category="women-dresses",
            is_new_arrival=True,
        ),
        make_product(sku="W-2", name="Silk Blouse", base_price=55.0, gender="women", brand="Lumen"),
    ]
    products[3].deactivate()
    for product in products:
        repo.add(product)
    return repo


class TestBrowse:
    def test_only_active_products(self, catalogue):
        result = catalogue.browse()
        assert result.total == 3
        assert "Silk Blouse" not in [p.name for p in result.items]

    def test_filters_combine(self, catalogue):
        result = catalogue.browse(gender="men", max_price=50.0)
        assert [p.name for p in result.items] == ["Oxford Shirt"]

    def test_brand_is_case_insensitive(self, catalogue):
        result = catalogue.browse(brand="lumen")
        assert [p.name for p in result.items] == ["Wrap Dress"]

    def test_pagination(self, catalogue):
        first = catalogue.browse(page=1, per_page=2)
        second = catalogue.browse(page=2, per_page=2)
        assert len(first.items) == 2
        assert len(second.items) == 1
        assert first.total == 3

    def test_page_must_be_positive(self, catalogue):
        with pytest.raises(ValidationError):
            catalogue.browse(page=0)


class TestSearch:
    def test_matches_name_case_insensitively(self, catalogue):
        assert [p.name for p in catalogue.search("oxford").items] == ["Oxford Shirt"]

    def test_matches_tags(self, catalogue):
        assert [p.name for p in catalogue.search("Office").items] == ["Oxford Shirt"]

    def test_matches_description(self, catalogue):
        assert catalogue.search("heavyweight").total == 3

    def test_skips_inactive_products(self, catalogue):
        assert catalogue.search("blouse").total == 0


class TestShowcases:
    def test_featured(self, catalogue):
        assert [p.name for p in catalogue.featured()] == ["Denim Jacket"]

    def test_new_arrivals(self, catalogue):
        assert [p.name for p in catalogue.new_arrivals()] == ["Wrap Dress"]

    def test_by_slug(self, catalogue):
        assert catalogue.by_slug("wrap-dress").sku == "W-1"

    def test_by_unknown_slug(self, catalogue):
        with pytest.raises(NotFoundError):
            catalogue.by_slug("nothing-here")
