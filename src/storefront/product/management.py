"""Catalogue maintenance — details, variants, images, activation and views."""

from protean import handle
from protean.fields import Boolean, Float, Identifier, Integer, List, String, Text
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.product.product import Product


@storefront.command(part_of="Product")
class UpdateProductDetails:
    product_id: Identifier(required=True)
    name: String(max_length=200)
    description: Text()
    short_description: String(max_length=500)
    brand: String(max_length=100)
    base_price: Float(min_value=0.0)
    sale_price: Float(min_value=0.0)
    clear_sale_price: Boolean(default=False)
    is_featured: Boolean()
    is_new_arrival: Boolean()
    tags: List(content_type=String(max_length=50))


@storefront.command(part_of="Product")
class AddVariant:
    product_id: Identifier(required=True)
    color: String(required=True, max_length=50)
    color_code: String(max_length=7)
    sizes: List()  # [{size, stock, price_adjustment}]


@storefront.command(part_of="Product")
class AddSize:
    product_id: Identifier(required=True)
    color: String(required=True, max_length=50)
    size: String(required=True, max_length=10)
    stock: Integer(default=0, min_value=0)
    price_adjustment: Float(default=0.0)


@storefront.command(part_of="Product")
class AddProductImage:
    product_id: Identifier(required=True)
    url: String(required=True, max_length=500)
    alt: String(max_length=255)
    is_primary: Boolean(default=False)


@storefront.command(part_of="Product")
class DeactivateProduct:
    product_id: Identifier(required=True)


@storefront.command(part_of="Product")
class ActivateProduct:
    product_id: Identifier(required=True)


@storefront.command(part_of="Product")
class RecordProductView:
    product_id: Identifier(required=True)


@storefront.command_handler(part_of=Product)
class ManageProductHandler:
    @handle(UpdateProductDetails)
    def update_details(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)

        changes = {
            "name": command.name,
            "description": command.description,
            "short_description": command.short_description,
            "brand": command.brand,
            "base_price": command.base_price,
            "is_featured": command.is_featured,
            "is_new_arrival": command.is_new_arrival,
            "tags": [t.lower() for t in command.tags] if command.tags else None,
        }
        if command.clear_sale_price:
            changes["sale_price"] = None
        elif command.sale_price is not None:
            changes["sale_price"] = command.sale_price

        product.update_details(**changes)
        repo.add(product)

    @handle(AddVariant)
    def add_variant(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.add_variant(
            color=command.color,
            color_code=command.color_code,
            sizes=command.sizes or [],
        )
        repo.add(product)

    @handle(AddSize)
    def add_size(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.add_size(
            command.color,
            command.size,
            stock=command.stock,
            price_adjustment=command.price_adjustment,
        )
        repo.add(product)

    @handle(AddProductImage)
    def add_image(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.add_image(url=command.url, alt=command.alt, is_primary=command.is_primary)
        repo.add(product)

    @handle(DeactivateProduct)
    def deactivate(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.deactivate()
        repo.add(product)

    @handle(ActivateProduct)
    def activate(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.activate()
        repo.add(product)

    @handle(RecordProductView)
    def record_view(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.record_view()
        repo.add(product)
