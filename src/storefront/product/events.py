"""Domain events for the Product aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, List, String

from storefront.domain import storefront


@storefront.event(part_of="Product")
class ProductCreated:
    """A new product was added to the catalogue."""

    __version__ = 1

    product_id: Identifier(required=True)
    sku: String(required=True)
    slug: String(required=True)
    name: String(required=True)
    category: String(required=True)
    base_price: Float(required=True)
    created_at: DateTime(required=True)


@storefront.event(part_of="Product")
class ProductDetailsUpdated:
    __version__ = 1

    product_id: Identifier(required=True)
    name: String(required=True)
    base_price: Float(required=True)
    sale_price: Float()


@storefront.event(part_of="Product")
class VariantAdded:
    """A new color was added to a product."""

    __version__ = 1

    product_id: Identifier(required=True)
    color: String(required=True)
    sizes: List(content_type=String())


@storefront.event(part_of="Product")
class ProductDeactivated:
    __version__ = 1

    product_id: Identifier(required=True)


@storefront.event(part_of="Product")
class StockAdjusted:
    """Stock of one color/size changed by ``delta``."""

    __version__ = 1

    product_id: Identifier(required=True)
    color: String(required=True)
    size: String(required=True)
    previous_stock: Integer(required=True)
    new_stock: Integer(required=True)
    delta: Integer(required=True)


@storefront.event(part_of="Product")
class ProductRatingChanged:
    """The incremental rating aggregate moved after a review was counted or dropped."""

    __version__ = 1

    product_id: Identifier(required=True)
    rating_average: Float(required=True)
    rating_count: Integer(required=True)
