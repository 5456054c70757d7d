"""Stock adjustment — command and handler.

The adjustment is applied to a freshly loaded product and saved with the
version it was loaded at. A competing save in between makes the write fail
with ``ExpectedVersionError``; the handler is then re-run against the new
stock level (bounded by ``[server.version_retry]``), so a decrement is only
ever applied to stock that is really there.
"""

from protean import handle
from protean.fields import Identifier, Integer, String
from protean.utils.globals import current_domain

from storefront.domain import logger, storefront
from storefront.product.product import Product


@storefront.command(part_of="Product")
class AdjustStock:
    product_id: Identifier(required=True)
    color: String(required=True, max_length=50)
    size: String(required=True, max_length=10)
    delta: Integer(required=True)


@storefront.command_handler(part_of=Product)
class AdjustStockHandler:
    @handle(AdjustStock)
    def adjust_stock(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        new_stock = product.update_stock(command.color, command.size, command.delta)
        repo.add(product)

        logger.info(
            "stock_adjusted",
            product_id=str(command.product_id),
            color=command.color,
            size=command.size,
            delta=command.delta,
            stock=new_stock,
        )
        return new_stock
