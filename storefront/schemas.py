import re
from datetime import datetime
from decimal import Decimal
from typing import Annotated, List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, PlainSerializer, field_validator
from pydantic.alias_generators import to_camel

from storefront.models import OrderStatus, Role

# amounts stay Decimal in Python and go out as JSON numbers
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class Schema(BaseModel):
    # JSON bodies use camelCase, attributes stay snake_case
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


# ----------------------------
# Auth
# ----------------------------

class RegisterRequest(Schema):
    username: str = Field(..., min_length=1, max_length=50)
    email: EmailStr
    password: str

    @field_validator("username")
    def username_must_not_be_blank(cls, v):
        if not v.strip():
            raise ValueError("Username must not be blank")
        return v.strip()

    # Must be at least 8 chars long, contain one digit, one uppercase, one lowercase and one special char
    @field_validator("password")
    def password_must_be_strong(cls, v):
        if len(v) < 8 or \
           not re.search(r"\d", v) or \
           not re.search(r"[A-Z]", v) or \
           not re.search(r"[a-z]", v) or \
           not re.search(r"[\W_]", v):
            raise ValueError("Password does not meet strength requirements")
        return v


class LoginRequest(Schema):
    username: str
    password: str


class AuthResponse(Schema):
    token: str
    username: str
    role: Role


class UserResponse(Schema):
    id: int
    username: str
    email: str
    role: Role


# ----------------------------
# Products
# ----------------------------

class ProductCreate(Schema):
    name: str = Field(..., max_length=150)
    description: Optional[str] = Field(None, max_length=1000)
    price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    stock: int = Field(..., ge=0)


class ProductUpdate(Schema):
    name: Optional[str] = Field(None, max_length=150)
    description: Optional[str] = Field(None, max_length=1000)
    price: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    stock: Optional[int] = Field(None, ge=0)


class ProductResponse(Schema):
    id: int
    name: str
    description: Optional[str] = None
    price: Money
    stock: int


# ----------------------------
# Orders
# ----------------------------

class OrderItemRequest(Schema):
    product_id: int
    quantity: int = Field(..., gt=0)


class OrderRequest(Schema):
    order_items: List[OrderItemRequest] = Field(..., min_length=1)


class OrderItemResponse(Schema):
    id: int
    product_id: int
    product_name: str
    quantity: int
    price: Money


class OrderResponse(Schema):
    id: int
    user_id: int
    username: str
    total_amount: Money
    status: OrderStatus
    created_at: datetime
    order_items: List[OrderItemResponse]


def order_to_response(order):
    """Maps an order loaded with its user and lines to the response shape."""
    return OrderResponse(
        id=order.id,
        user_id=order.user.id,
        username=order.user.username,
        total_amount=order.total_amount,
        status=order.status,
        created_at=order.created_at,
        order_items=[
            OrderItemResponse(
                id=item.id,
                product_id=item.product.id,
                product_name=item.product.name,
                quantity=item.quantity,
                price=item.price,
            )
            for item in order.items
        ],
    )
