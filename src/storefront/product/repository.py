"""Product repository — catalogue read queries."""

from protean.exceptions import ObjectNotFoundError
from protean.utils.query import Q

from storefront.domain import storefront
from storefront.exceptions import NotFoundError
from storefront.product.product import Product
from storefront.utils.pagination import paginate


@storefront.repository(part_of=Product)
class ProductRepository:
    def get(self, identifier):
        try:
            return super().get(identifier)
        except ObjectNotFoundError:
            raise NotFoundError(f"Product {identifier} not found") from None

    def by_slug(self, slug):
        product = self.query.filter(slug=slug).all().first
        if product is None:
            raise NotFoundError(f"Product with slug '{slug}' not found")
        return product

    def sku_taken(self, sku):
        return self.exists(Q(sku=sku.upper()))

    def slug_taken(self, slug):
        return self.exists(Q(slug=slug))

    def unique_slug(self, base_slug):
        """``base_slug`` if free, else the first free ``base_slug-N`` (N ≥ 2)."""
        slug, suffix = base_slug, 2
        while self.slug_taken(slug):
            slug = f"{base_slug}-{suffix}"
            suffix += 1
        return slug

    def browse(
        self,
        category=None,
        gender=None,
        brand=None,
        min_price=None,
        max_price=None,
        page=1,
        per_page=None,
    ):
        """Active products, newest first, narrowed by the given filters."""
        criteria = {"is_active": True}
        if category:
            criteria["category"] = category
        if gender:
            criteria["gender"] = gender
        if brand:
            criteria["brand__iexact"] = brand
        if min_price is not None:
            criteria["base_price__gte"] = min_price
        if max_price is not None:
            criteria["base_price__lte"] = max_price

        return paginate(self.query.filter(**criteria).order_by("-created_at"), page, per_page)

    def search(self, term, page=1, per_page=None):
        """Case-insensitive match on name or description, or an exact tag."""
        term = term.strip()
        matches = Q(name__icontains=term) | Q(description__icontains=term) | Q(tags__contains=term.lower())
        queryset = self.query.filter(matches, is_active=True).order_by("-created_at")
        return paginate(queryset, page, per_page)

    def featured(self, limit=10):
        return self.query.filter(is_featured=True, is_active=True).order_by("-created_at").limit(limit).all().items

    def new_arrivals(self, limit=10):
        return self.query.filter(is_new_arrival=True, is_active=True).order_by("-created_at").limit(limit).all().items
