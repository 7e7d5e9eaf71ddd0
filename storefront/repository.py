from sqlalchemy import exists, or_, select, update
from sqlalchemy.orm import joinedload, selectinload

from storefront.models import Order, OrderItem, Product, User


class Repository:
    """Save/find/delete by integer id for one mapped class."""

    model = None

    def __init__(self, db):
        self.db = db

    def get(self, id):
        return self.db.get(self.model, id)

    def list(self):
        return self.db.scalars(select(self.model).order_by(self.model.id)).all()

    def add(self, obj):
        self.db.add(obj)
        self.db.flush()
        return obj

    def delete(self, obj):
        self.db.delete(obj)
        self.db.flush()


class UserRepository(Repository):
    model = User

    def find_by_username(self, username):
        return self.db.scalars(select(User).where(User.username == username)).first()

    def username_or_email_taken(self, username, email):
        query = select(User.id).where(or_(User.username == username, User.email == email))
        return self.db.scalars(query).first() is not None


class ProductRepository(Repository):
    model = Product

    def get_for_update(self, id):
        # row lock where the engine supports it, the guarded decrement below
        # keeps stock non-negative where it does not
        query = (
            select(Product)
            .where(Product.id == id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return self.db.scalars(query).first()

    def decrement_stock(self, id, quantity):
        """Takes ``quantity`` off the product's stock if enough is left.

        Returns False, leaving the row untouched, when the stock would go
        negative.
        """
        result = self.db.execute(
            update(Product)
            .where(Product.id == id, Product.stock >= quantity)
            .values(stock=Product.stock - quantity)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def is_referenced(self, id):
        return self.db.scalar(select(exists().where(OrderItem.product_id == id)))


class OrderRepository(Repository):
    model = Order

    def _with_lines(self):
        return select(Order).options(
            joinedload(Order.user),
            selectinload(Order.items).joinedload(OrderItem.product),
        )

    def get(self, id):
        return self.db.scalars(self._with_lines().where(Order.id == id)).first()

    def list(self):
        return self.db.scalars(self._with_lines().order_by(Order.id)).all()

    def list_by_user(self, user_id):
        query = self._with_lines().where(Order.user_id == user_id).order_by(Order.id)
        return self.db.scalars(query).all()


class OrderItemRepository(Repository):
    model = OrderItem
