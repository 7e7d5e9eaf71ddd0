import logging

from storefront.errors import Conflict, Forbidden, NotFound, ValidationError
from storefront.models import Product
from storefront.repository import ProductRepository

logger = logging.getLogger(__name__)


def _require_admin(identity):
    if identity is None or not identity.is_admin:
        raise Forbidden("Admins only")


def _validate(name=None, price=None, stock=None, creating=False):
    if (creating or name is not None) and (name is None or not name.strip()):
        raise ValidationError("Name must not be blank")
    if creating and (price is None or stock is None):
        raise ValidationError("Price and stock are required")
    if price is not None and price < 0:
        raise ValidationError("Price cannot be negative")
    if stock is not None and stock < 0:
        raise ValidationError("Stock cannot be negative")


def list_products(db):
    return ProductRepository(db).list()


def get_product(db, product_id):
    product = ProductRepository(db).get(product_id)
    if not product:
        raise NotFound(f"Product not found with id: {product_id}")
    return product


def create_product(db, identity, name, description, price, stock):
    _require_admin(identity)
    _validate(name, price, stock, creating=True)

    product = Product(name=name.strip(), description=description, price=price, stock=stock)
    ProductRepository(db).add(product)
    db.commit()
    db.refresh(product)
    logger.info("Product %s created by %s", product.id, identity.username)
    return product


def update_product(db, identity, product_id, **fields):
    """Applies the given fields; fields passed as None are left unchanged."""
    _require_admin(identity)
    product = get_product(db, product_id)
    fields = {k: v for k, v in fields.items() if v is not None}
    _validate(fields.get("name"), fields.get("price"), fields.get("stock"))

    if "name" in fields:
        fields["name"] = fields["name"].strip()
    for key, value in fields.items():
        setattr(product, key, value)
    db.commit()
    db.refresh(product)
    logger.info("Product %s updated by %s: %s", product_id, identity.username, sorted(fields))
    return product


def delete_product(db, identity, product_id):
    _require_admin(identity)
    products = ProductRepository(db)
    product = get_product(db, product_id)
    # order lines keep pointing at the product they were placed for
    if products.is_referenced(product_id):
        raise Conflict(f"Product {product_id} is referenced by existing orders")

    products.delete(product)
    db.commit()
    logger.info("Product %s deleted by %s", product_id, identity.username)
