"""Product aggregate root with Variant and SizeStock entities.

A product is sold in colors (``Variant``), each broken down into sizes
(``SizeStock``) that carry their own stock level and price adjustment.
Stock and the rating aggregate change often and concurrently, so every
mutation goes through methods on the root; saving the root bumps its version
and a competing save of a stale copy is rejected.
"""

import re
from datetime import UTC, datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import (
    Boolean,
    DateTime,
    Float,
    HasMany,
    Integer,
    List,
    String,
    ValueObject,
)

from storefront.domain import storefront
from storefront.exceptions import InsufficientStockError, NotFoundError

# Sentinel for distinguishing "not provided" from None in partial updates
_UNSET = object()


class Category(Enum):
    MEN_SHIRTS = "men-shirts"
    MEN_PANTS = "men-pants"
    MEN_JACKETS = "men-jackets"
    MEN_SHOES = "men-shoes"
    MEN_ACCESSORIES = "men-accessories"
    WOMEN_DRESSES = "women-dresses"
    WOMEN_TOPS = "women-tops"
    WOMEN_BOTTOMS = "women-bottoms"
    WOMEN_JACKETS = "women-jackets"
    WOMEN_SHOES = "women-shoes"
    WOMEN_ACCESSORIES = "women-accessories"
    KIDS_BOYS = "kids-boys"
    KIDS_GIRLS = "kids-girls"
    KIDS_SHOES = "kids-shoes"
    KIDS_ACCESSORIES = "kids-accessories"
    UNISEX = "unisex"


class Gender(Enum):
    MEN = "men"
    WOMEN = "women"
    KIDS = "kids"
    UNISEX = "unisex"


class Currency(Enum):
    USD = "USD"
    EUR = "EUR"
    GBP = "GBP"
    CAD = "CAD"


class Size(Enum):
    XS = "XS"
    S = "S"
    M = "M"
    L = "L"
    XL = "XL"
    XXL = "XXL"
    W28 = "28"
    W30 = "30"
    W32 = "32"
    W34 = "34"
    W36 = "36"
    W38 = "38"
    W40 = "40"
    W42 = "42"
    SHOE_6 = "6"
    SHOE_7 = "7"
    SHOE_8 = "8"
    SHOE_9 = "9"
    SHOE_10 = "10"
    SHOE_11 = "11"
    SHOE_12 = "12"


def slugify(name):
    """Lower-case, keep ``[a-z0-9 -]``, whitespace runs to ``-``, collapse dashes."""
    slug = name.lower()
    slug = re.sub(r"[^a-z0-9 -]", "", slug)
    slug = re.sub(r"\s+", "-", slug)
    slug = re.sub(r"-+", "-", slug)
    return slug.strip("-")


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@storefront.value_object(part_of="Product")
class Weight:
    """Shipping weight."""

    value: Float(min_value=0.0)
    unit: String(max_length=3, default="kg")

    @invariant.post
    def unit_must_be_valid(self):
        if self.unit not in ("kg", "lbs", "g", "oz"):
            raise ValidationError({"unit": [f"Weight unit must be 'kg', 'lbs', 'g' or 'oz', got '{self.unit}'"]})


@storefront.value_object(part_of="Product")
class Dimensions:
    """Package dimensions."""

    length: Float(min_value=0.0)
    width: Float(min_value=0.0)
    height: Float(min_value=0.0)
    unit: String(max_length=2, default="cm")

    @invariant.post
    def unit_must_be_valid(self):
        if self.unit not in ("cm", "in"):
            raise ValidationError({"unit": [f"Dimension unit must be 'cm' or 'in', got '{self.unit}'"]})


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@storefront.entity(part_of="Product")
class Variant:
    """A color of a product and its per-size stock."""

    color: String(required=True, max_length=50)
    color_code: String(max_length=7)
    sizes: HasMany("SizeStock")

    def find_size(self, size):
        return next((s for s in self.sizes if s.size == size), None)


@storefront.entity(part_of=Variant)
class SizeStock:
    """Stock level and price adjustment of one size within a color."""

    size: String(required=True, max_length=10, choices=Size)
    stock: Integer(required=True, min_value=0, default=0)
    price_adjustment: Float(default=0.0)


@storefront.entity(part_of="Product")
class Image:
    """Product image."""

    url: String(required=True, max_length=500)
    alt: String(max_length=255)
    is_primary: Boolean(default=False)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@storefront.aggregate
class Product:
    """A catalogue entry: pricing, color/size stock matrix and rating aggregate."""

    sku: String(required=True, max_length=50, unique=True)
    name: String(required=True, max_length=200)
    slug: String(required=True, max_length=255, unique=True)
    description: String(required=True, max_length=2000)
    short_description: String(max_length=500)
    category: String(required=True, max_length=30, choices=Category)
    subcategory: String(max_length=100)
    brand: String(required=True, max_length=100)
    gender: String(max_length=10, choices=Gender, default=Gender.UNISEX.value)
    base_price: Float(required=True, min_value=0.0)
    sale_price: Float(min_value=0.0)
    currency: String(max_length=3, choices=Currency, default=Currency.USD.value)
    variants: HasMany(Variant)
    images: HasMany(Image)
    materials: List(content_type=String(max_length=100))
    care_instructions: List(content_type=String(max_length=255))
    features: List(content_type=String(max_length=255))
    tags: List(content_type=String(max_length=50))
    weight: ValueObject(Weight)
    dimensions: ValueObject(Dimensions)
    rating_average: Float(default=0.0, min_value=0.0, max_value=5.0)
    rating_count: Integer(default=0, min_value=0)
    is_active: Boolean(default=True)
    is_featured: Boolean(default=False)
    is_new_arrival: Boolean(default=False)
    view_count: Integer(default=0, min_value=0)
    sales_count: Integer(default=0, min_value=0)
    created_at: DateTime()
    updated_at: DateTime()

    @invariant.post
    def sku_must_be_alphanumeric(self):
        if self.sku and not re.fullmatch(r"[A-Z0-9-]+", self.sku):
            raise ValidationError({"sku": ["SKU may only contain uppercase letters, digits and hyphens"]})

    @invariant.post
    def sale_price_must_be_below_base_price(self):
        if self.sale_price is not None and self.base_price is not None and self.sale_price >= self.base_price:
            raise ValidationError({"sale_price": ["Sale price must be less than base price"]})

    @invariant.post
    def colors_must_be_unique(self):
        colors = [v.color.lower() for v in self.variants]
        if len(colors) != len(set(colors)):
            raise ValidationError({"variants": ["Each color can only appear once"]})

    @invariant.post
    def sizes_must_be_unique_per_color(self):
        for variant in self.variants:
            sizes = [s.size for s in variant.sizes]
            if len(sizes) != len(set(sizes)):
                raise ValidationError({"variants": [f"Duplicate size entries for color '{variant.color}'"]})

    @invariant.post
    def at_most_one_primary_image(self):
        if len([i for i in self.images if i.is_primary]) > 1:
            raise ValidationError({"images": ["Only one image can be marked as primary"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        sku,
        name,
        description,
        category,
        brand,
        base_price,
        slug=None,
        sale_price=None,
        **details,
    ):
        from storefront.product.events import ProductCreated

        now = datetime.now(UTC)
        product = cls(
            sku=sku.upper(),
            name=name,
            slug=slug or slugify(name),
            description=description,
            category=category,
            brand=brand,
            base_price=base_price,
            sale_price=sale_price,
            created_at=now,
            updated_at=now,
            **details,
        )
        product.raise_(
            ProductCreated(
                product_id=product.id,
                sku=product.sku,
                slug=product.slug,
                name=product.name,
                category=product.category,
                base_price=product.base_price,
                created_at=now,
            )
        )
        return product

    # -------------------------------------------------------------------
    # Derived values
    # -------------------------------------------------------------------
    @property
    def current_price(self):
        return self.sale_price if self.sale_price is not None else self.base_price

    @property
    def discount_percentage(self):
        if self.sale_price is None or not self.base_price:
            return 0
        return round((self.base_price - self.sale_price) / self.base_price * 100)

    @property
    def total_stock(self):
        return sum(s.stock for v in self.variants for s in v.sizes)

    @property
    def is_available(self):
        return bool(self.is_active) and self.total_stock > 0

    @property
    def primary_image(self):
        primary = next((i for i in self.images if i.is_primary), None)
        if primary is None and self.images:
            return self.images[0]
        return primary

    # -------------------------------------------------------------------
    # Variant / size lookup
    # -------------------------------------------------------------------
    def find_variant(self, color):
        if color is None:
            return None
        return next((v for v in self.variants if v.color.lower() == color.lower()), None)

    def get_available_sizes(self, color):
        """Sizes of ``color`` that are in stock, each with its effective price."""
        variant = self.find_variant(color)
        if variant is None:
            return []
        return [
            {
                "size": s.size,
                "stock": s.stock,
                "price": round(self.current_price + (s.price_adjustment or 0.0), 2),
            }
            for s in variant.sizes
            if s.stock > 0
        ]

    def get_stock(self, color, size):
        variant = self.find_variant(color)
        if variant is None:
            return 0
        entry = variant.find_size(size)
        return entry.stock if entry else 0

    def effective_price(self, color, size):
        """Unit price of ``color``/``size``; raises ``NotFoundError`` when absent."""
        entry = self._size_entry(color, size)
        return round(self.current_price + (entry.price_adjustment or 0.0), 2)

    def _size_entry(self, color, size):
        variant = self.find_variant(color)
        if variant is None:
            raise NotFoundError(f"Color '{color}' not found for product {self.id}")
        entry = variant.find_size(size)
        if entry is None:
            raise NotFoundError(f"Size '{size}' not found for color '{color}' of product {self.id}")
        return entry

    # -------------------------------------------------------------------
    # Catalogue maintenance
    # -------------------------------------------------------------------
    def update_details(
        self,
        name=None,
        description=None,
        short_description=None,
        brand=None,
        base_price=None,
        sale_price=_UNSET,
        is_featured=None,
        is_new_arrival=None,
        tags=None,
    ):
        """Change descriptive and pricing fields. SKU and slug never change.

        ``sale_price`` is only touched when passed; pass ``None`` to end a sale.
        """
        from storefront.product.events import ProductDetailsUpdated

        with atomic_change(self):
            if name is not None:
                self.name = name
            if description is not None:
                self.description = description
            if short_description is not None:
                self.short_description = short_description
            if brand is not None:
                self.brand = brand
            if base_price is not None:
                self.base_price = base_price
            if sale_price is not _UNSET:
                self.sale_price = sale_price
            if is_featured is not None:
                self.is_featured = is_featured
            if is_new_arrival is not None:
                self.is_new_arrival = is_new_arrival
            if tags is not None:
                self.tags = tags
            self.updated_at = datetime.now(UTC)

        self.raise_(
            ProductDetailsUpdated(
                product_id=self.id,
                name=self.name,
                base_price=self.base_price,
                sale_price=self.sale_price,
            )
        )

    def add_variant(self, color, color_code=None, sizes=None):
        """Add a color with optional initial sizes ``[{size, stock, price_adjustment}]``."""
        from storefront.product.events import VariantAdded

        if self.find_variant(color) is not None:
            raise ValidationError({"color": [f"Color '{color}' already exists"]})

        variant = Variant(color=color, color_code=color_code)
        self.add_variants(variant)
        for entry in sizes or []:
            self.add_size(
                color,
                entry["size"],
                stock=entry.get("stock", 0),
                price_adjustment=entry.get("price_adjustment", 0.0),
            )
        self.updated_at = datetime.now(UTC)

        self.raise_(VariantAdded(product_id=self.id, color=color, sizes=[s.size for s in variant.sizes]))
        return variant

    def add_size(self, color, size, stock=0, price_adjustment=0.0):
        variant = self.find_variant(color)
        if variant is None:
            raise NotFoundError(f"Color '{color}' not found for product {self.id}")
        if variant.find_size(size) is not None:
            raise ValidationError({"size": [f"Size '{size}' already exists for color '{color}'"]})

        variant.add_sizes(SizeStock(size=size, stock=stock, price_adjustment=price_adjustment))
        self.updated_at = datetime.now(UTC)

    def add_image(self, url, alt=None, is_primary=False):
        if is_primary:
            for image in self.images:
                image.is_primary = False
        self.add_images(Image(url=url, alt=alt, is_primary=is_primary))
        self.updated_at = datetime.now(UTC)

    def deactivate(self):
        from storefront.product.events import ProductDeactivated

        if not self.is_active:
            raise ValidationError({"is_active": ["Product is already inactive"]})
        self.is_active = False
        self.updated_at = datetime.now(UTC)
        self.raise_(ProductDeactivated(product_id=self.id))

    def activate(self):
        if self.is_active:
            raise ValidationError({"is_active": ["Product is already active"]})
        self.is_active = True
        self.updated_at = datetime.now(UTC)

    def record_view(self):
        self.view_count += 1

    def record_sale(self, quantity):
        self.sales_count += quantity

    # -------------------------------------------------------------------
    # Stock
    # -------------------------------------------------------------------
    def update_stock(self, color, size, delta):
        """Apply ``delta`` to the stock of ``color``/``size``.

        Positive deltas restock, negative ones consume. The stock is left
        untouched when the result would be negative.
        """
        from storefront.product.events import StockAdjusted

        entry = self._size_entry(color, size)
        if entry.stock + delta < 0:
            raise InsufficientStockError(color, size, available=entry.stock, requested=-delta)

        previous = entry.stock
        entry.stock = previous + delta
        self.updated_at = datetime.now(UTC)

        self.raise_(
            StockAdjusted(
                product_id=self.id,
                color=color,
                size=size,
                previous_stock=previous,
                new_stock=entry.stock,
                delta=delta,
            )
        )
        return entry.stock

    # -------------------------------------------------------------------
    # Rating aggregate
    # -------------------------------------------------------------------
    def add_review(self, rating):
        from storefront.product.events import ProductRatingChanged

        count = self.rating_count + 1
        self.rating_average = (self.rating_average * self.rating_count + rating) / count
        self.rating_count = count

        self.raise_(
            ProductRatingChanged(
                product_id=self.id,
                rating_average=self.rating_average,
                rating_count=self.rating_count,
            )
        )

    def remove_review(self, rating):
        from storefront.product.events import ProductRatingChanged

        if self.rating_count > 1:
            count = self.rating_count - 1
            self.rating_average = (self.rating_average * self.rating_count - rating) / count
            self.rating_count = count
        else:
            self.rating_average = 0.0
            self.rating_count = 0

        self.raise_(
            ProductRatingChanged(
                product_id=self.id,
                rating_average=self.rating_average,
                rating_count=self.rating_count,
            )
        )
