"""Catalogue maintenance: register products, restock, change availability."""

import json

from protean import handle
from protean.fields import Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.product.product import Product, ProductStatus


@storefront.command(part_of="Product")
class RegisterProduct:
    name = String(required=True, max_length=255)
    price = Float(required=True, min_value=0.0)
    discount = Float(default=0.0)
    stock = Integer(default=0, min_value=0)
    status = String(choices=ProductStatus, default=ProductStatus.ACTIVE.value)
    image_url = String(max_length=500)
    variants = Text()  # JSON: list of {name, value, price, sku}


@storefront.command(part_of="Product")
class RestockProduct:
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)


@storefront.command(part_of="Product")
class ChangeProductStatus:
    product_id = Identifier(required=True)
    status = String(required=True, choices=ProductStatus)


@storefront.command_handler(part_of=Product)
class ManageProductHandler:
    @handle(RegisterProduct)
    def register_product(self, command):
        variants = json.loads(command.variants) if isinstance(command.variants, str) else command.variants
        product = Product.register(
            name=command.name,
            price=command.price,
            discount=command.discount,
            stock=command.stock or 0,
            status=command.status,
            image_url=command.image_url,
            variants=variants,
        )
        current_domain.repository_for(Product).add(product)
        return str(product.id)

    @handle(RestockProduct)
    def restock_product(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.increment_stock(command.quantity, reason="restock")
        repo.add(product)

    @handle(ChangeProductStatus)
    def change_product_status(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.change_status(command.status)
        repo.add(product)
