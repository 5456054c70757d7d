"""Product creation — command and handler."""

from protean import handle
from protean.fields import Boolean, Dict, Float, List, String, Text
from protean.utils.globals import current_domain

from storefront.domain import logger, storefront
from storefront.exceptions import DuplicateError
from storefront.product.product import Dimensions, Product, Weight, slugify


@storefront.command(part_of="Product")
class CreateProduct:
    sku: String(required=True, max_length=50)
    name: String(required=True, max_length=200)
    description: Text(required=True)
    short_description: String(max_length=500)
    category: String(required=True, max_length=30)
    subcategory: String(max_length=100)
    brand: String(required=True, max_length=100)
    gender: String(max_length=10)
    base_price: Float(required=True, min_value=0.0)
    sale_price: Float(min_value=0.0)
    currency: String(max_length=3)
    slug: String(max_length=255)
    materials: List(content_type=String(max_length=100))
    care_instructions: List(content_type=String(max_length=255))
    features: List(content_type=String(max_length=255))
    tags: List(content_type=String(max_length=50))
    variants: List()  # [{color, color_code, sizes: [{size, stock, price_adjustment}]}]
    images: List()  # [{url, alt, is_primary}]
    weight: Dict()  # {value, unit}
    dimensions: Dict()  # {length, width, height, unit}
    is_featured: Boolean(default=False)
    is_new_arrival: Boolean(default=False)


@storefront.command_handler(part_of=Product)
class CreateProductHandler:
    @handle(CreateProduct)
    def create_product(self, command):
        repo = current_domain.repository_for(Product)

        if repo.sku_taken(command.sku):
            raise DuplicateError(f"SKU '{command.sku.upper()}' is already in use")

        if command.slug:
            if repo.slug_taken(command.slug):
                raise DuplicateError(f"Slug '{command.slug}' is already in use")
            slug = command.slug
        else:
            slug = repo.unique_slug(slugify(command.name))

        details = {
            "short_description": command.short_description,
            "subcategory": command.subcategory,
            "materials": command.materials or [],
            "care_instructions": command.care_instructions or [],
            "features": command.features or [],
            "tags": [t.lower() for t in (command.tags or [])],
            "is_featured": command.is_featured,
            "is_new_arrival": command.is_new_arrival,
        }
        if command.gender:
            details["gender"] = command.gender
        if command.currency:
            details["currency"] = command.currency
        if command.weight:
            details["weight"] = Weight(**command.weight)
        if command.dimensions:
            details["dimensions"] = Dimensions(**command.dimensions)

        product = Product.create(
            sku=command.sku,
            name=command.name,
            description=command.description,
            category=command.category,
            brand=command.brand,
            base_price=command.base_price,
            sale_price=command.sale_price,
            slug=slug,
            **details,
        )

        for variant in command.variants or []:
            product.add_variant(
                color=variant["color"],
                color_code=variant.get("color_code"),
                sizes=variant.get("sizes", []),
            )
        for image in command.images or []:
            product.add_image(
                url=image["url"],
                alt=image.get("alt"),
                is_primary=image.get("is_primary", False),
            )

        repo.add(product)
        logger.info("product_created", product_id=str(product.id), sku=product.sku, slug=product.slug)
        return str(product.id)
