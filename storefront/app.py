from contextlib import asynccontextmanager
from typing import List

from fastapi import APIRouter, Depends, FastAPI, Response
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.orm import Session

from storefront import catalog, config, identity, orders
from storefront.database import SessionLocal, get_db, init_db
from storefront.errors import register_handlers
from storefront.gate import authorize
from storefront.models import OrderStatus
from storefront.schemas import (
    AuthResponse,
    LoginRequest,
    OrderRequest,
    OrderResponse,
    ProductCreate,
    ProductResponse,
    ProductUpdate,
    RegisterRequest,
    UserResponse,
    order_to_response,
)
from storefront.security import Identity

logger = config.setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    if config.ADMIN_USERNAME and config.ADMIN_PASSWORD:
        db = SessionLocal()
        try:
            identity.ensure_admin(
                db,
                config.ADMIN_USERNAME,
                config.ADMIN_EMAIL or f"{config.ADMIN_USERNAME}@localhost",
                config.ADMIN_PASSWORD,
            )
        finally:
            db.close()
    logger.info("Storefront API ready under %s", config.API_PREFIX)
    yield


# every route passes through the access-control gate before its handler
app = FastAPI(title="Storefront API", lifespan=lifespan, dependencies=[Depends(authorize)])
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)
register_handlers(app)

router = APIRouter()


@router.get("/health")
def health():
    return {"status": "ok"}


# ------------------------------------------------------------
# User Registration and Login
# ------------------------------------------------------------

@router.post("/auth/register", response_model=AuthResponse, status_code=201)
def register(payload: RegisterRequest, db: Session = Depends(get_db)):
    return identity.register(db, payload.username, payload.email, payload.password)


@router.post("/auth/login", response_model=AuthResponse)
def login(payload: LoginRequest, db: Session = Depends(get_db)):
    return identity.login(db, payload.username, payload.password)


@router.get("/admin/users", response_model=List[UserResponse])
def get_users(db: Session = Depends(get_db), caller: Identity = Depends(authorize)):
    return identity.list_users(db, caller)


# ------------------------------------------------------------
# Products
# ------------------------------------------------------------

@router.get("/products", response_model=List[ProductResponse])
def list_products(db: Session = Depends(get_db)):
    return catalog.list_products(db)


@router.get("/products/{product_id}", response_model=ProductResponse)
def get_product(product_id: int, db: Session = Depends(get_db)):
    return catalog.get_product(db, product_id)


@router.post("/products", response_model=ProductResponse, status_code=201)
def create_product(payload: ProductCreate, db: Session = Depends(get_db), caller: Identity = Depends(authorize)):
    return catalog.create_product(db, caller, payload.name, payload.description, payload.price, payload.stock)


@router.put("/products/{product_id}", response_model=ProductResponse)
def update_product(
    product_id: int,
    payload: ProductUpdate,
    db: Session = Depends(get_db),
    caller: Identity = Depends(authorize),
):
    return catalog.update_product(
        db,
        caller,
        product_id,
        name=payload.name,
        description=payload.description,
        price=payload.price,
        stock=payload.stock,
    )


@router.delete("/products/{product_id}", status_code=204)
def delete_product(product_id: int, db: Session = Depends(get_db), caller: Identity = Depends(authorize)):
    catalog.delete_product(db, caller, product_id)
    return Response(status_code=204)


# ------------------------------------------------------------
# Orders
# ------------------------------------------------------------

@router.post("/orders", response_model=OrderResponse, status_code=201)
def create_order(payload: OrderRequest, db: Session = Depends(get_db), caller: Identity = Depends(authorize)):
    lines = [(item.product_id, item.quantity) for item in payload.order_items]
    return order_to_response(orders.create_order(db, caller, lines))


@router.get("/orders", response_model=List[OrderResponse])
def list_orders(db: Session = Depends(get_db), caller: Identity = Depends(authorize)):
    return [order_to_response(order) for order in orders.list_orders(db, caller)]


@router.get("/orders/{order_id}", response_model=OrderResponse)
def get_order(order_id: int, db: Session = Depends(get_db), caller: Identity = Depends(authorize)):
    return order_to_response(orders.get_order(db, caller, order_id))


@router.put("/admin/orders/{order_id}/status", response_model=OrderResponse)
def update_order_status(
    order_id: int,
    status: OrderStatus,
    db: Session = Depends(get_db),
    caller: Identity = Depends(authorize),
):
    return order_to_response(orders.update_status(db, caller, order_id, status))


# ------------------------------------------------------------
# Admin aliases for product management
# ------------------------------------------------------------

admin_router = APIRouter(prefix="/admin")
admin_router.add_api_route(
    "/products", create_product, methods=["POST"], response_model=ProductResponse, status_code=201
)
admin_router.add_api_route(
    "/products/{product_id}", update_product, methods=["PUT"], response_model=ProductResponse
)
admin_router.add_api_route("/products/{product_id}", delete_product, methods=["DELETE"], status_code=204)


app.include_router(router, prefix=config.API_PREFIX)
app.include_router(admin_router, prefix=config.API_PREFIX)
