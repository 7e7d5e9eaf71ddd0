"""Order placement, lookup and status changes."""
import logging
from decimal import Decimal

from storefront import identity as identities
from storefront.errors import Forbidden, NotFound, ValidationError
from storefront.models import Order, OrderItem, OrderStatus, Role
from storefront.repository import OrderItemRepository, OrderRepository, ProductRepository

logger = logging.getLogger(__name__)


def create_order(db, identity, lines):
    """Places an order for ``lines``, a list of ``(product_id, quantity)``.

    Each product is checked and decremented in request order. The stock
    changes and the order with its lines are committed together; on any
    failure nothing is kept.
    """
    user = identities.resolve(db, identity)
    username = user.username
    if not lines:
        raise ValidationError("Order items are required")

    products = ProductRepository(db)
    order_items = OrderItemRepository(db)
    orders = OrderRepository(db)
    try:
        order = Order(user_id=user.id, status=OrderStatus.PENDING, total_amount=Decimal("0.00"))
        orders.add(order)

        total = Decimal("0.00")
        for product_id, quantity in lines:
            if quantity <= 0:
                raise ValidationError("Quantity must be positive")
            product = products.get_for_update(product_id)
            if not product:
                raise NotFound(f"Product not found with id: {product_id}")
            if product.stock < quantity or not products.decrement_stock(product.id, quantity):
                raise ValidationError(f"Insufficient stock for product: {product.name}")

            order_items.add(
                OrderItem(order_id=order.id, product_id=product.id, quantity=quantity, price=product.price)
            )
            total += product.price * quantity

        order.total_amount = total
        db.commit()
    except Exception as exc:
        db.rollback()
        logger.info("Order by %s rejected: %s", username, exc)
        raise

    logger.info("Order %s placed by %s, total %s", order.id, username, total)
    return get_order(db, identity, order.id)


def list_orders(db, identity):
    user = identities.resolve(db, identity)
    orders = OrderRepository(db)
    if user.role == Role.ADMIN:
        return orders.list()
    return orders.list_by_user(user.id)


def get_order(db, identity, order_id):
    user = identities.resolve(db, identity)
    order = OrderRepository(db).get(order_id)
    if not order:
        raise NotFound(f"Order not found with id: {order_id}")
    if user.role != Role.ADMIN and order.user_id != user.id:
        raise Forbidden("Access denied")
    return order


def update_status(db, identity, order_id, status):
    # any status may follow any other, including moving back to PENDING
    user = identities.resolve(db, identity)
    if user.role != Role.ADMIN:
        raise Forbidden("Admins only")

    order = OrderRepository(db).get(order_id)
    if not order:
        raise NotFound(f"Order not found with id: {order_id}")
    previous = order.status
    order.status = OrderStatus(status)
    db.commit()
    logger.info("Order %s status %s -> %s by %s", order_id, previous.value, order.status.value, user.username)
    return OrderRepository(db).get(order_id)
