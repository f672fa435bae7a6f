import os
from typing import List, Optional

import structlog
from fastapi import Depends, FastAPI, Header, HTTPException, Query, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from fastapi.security import OAuth2PasswordBearer

import database
from auth import decode_access_token, token_for
from errors import StorefrontError
from logging_setup import configure_logging
from schemas import (
    Availability,
    CartItemIn,
    Category,
    FilterState,
    OrderStatusIn,
    ProductIn,
    ProductUpdate,
    QuantityIn,
    ReviewIn,
    SessionState,
    SignInIn,
    SignUpIn,
    SortOption,
    User,
)
from seed import seed_products, seed_reviews, seed_users
from settings import Settings
from store import Store

settings = Settings.from_env()
configure_logging(settings.log_level)
logger = structlog.get_logger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/signin")

app = FastAPI(title="Khemixall Medical Storefront API", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.state.store = Store(
    settings,
    products=seed_products(),
    users=seed_users(),
    reviews=seed_reviews(),
)


@app.exception_handler(StorefrontError)
async def storefront_error_handler(request: Request, exc: StorefrontError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


# Dependencies
def get_store(request: Request) -> Store:
    return request.app.state.store


def get_session_id(x_session_id: Optional[str] = Header(default=None)) -> str:
    if not x_session_id:
        raise HTTPException(status_code=400, detail="Missing X-Session-Id header")
    return x_session_id


async def get_current_user(token: str = Depends(oauth2_scheme), store: Store = Depends(get_store)) -> User:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    user_id = decode_access_token(token, store.settings)
    if user_id is None:
        raise credentials_exception
    user = store.lookup_user(user_id)
    if not user:
        raise credentials_exception
    return user


def require_admin(user: User = Depends(get_current_user)) -> User:
    if not user.is_admin:
        raise HTTPException(status_code=403, detail="Admins only")
    return user


def auth_response(session: SessionState, store: Store) -> dict:
    return {
        "access_token": token_for(session.user, store.settings),
        "token_type": "bearer",
        "user": session.user,
        "resume_checkout": session.pending_checkout,
    }


# Routes
@app.get("/")
def root():
    return {"message": "Khemixall Medical Storefront API is running"}


@app.get("/test")
def test_database(store: Store = Depends(get_store)):
    response = {
        "backend": "✅ Running",
        "database": "❌ Not Available",
        "database_url": None,
        "database_name": None,
        "connection_status": "Not Connected",
        "collections": [],
        "catalog_size": len(store.products),
        "orders": len(store.orders),
    }

    try:
        if database.db is not None:
            response["database"] = "✅ Available"
            response["database_name"] = database.db.name
            response["connection_status"] = "Connected"
            try:
                collections = database.db.list_collection_names()
                response["collections"] = collections[:10]
                response["database"] = "✅ Connected & Working"
            except Exception as e:
                response["database"] = f"⚠️  Connected but Error: {str(e)[:50]}"
        else:
            response["database"] = "⚠️  Available but not initialized"
    except Exception as e:
        response["database"] = f"❌ Error: {str(e)[:50]}"

    response["database_url"] = "✅ Set" if os.getenv("DATABASE_URL") else "❌ Not Set"
    response["database_name"] = "✅ Set" if os.getenv("DATABASE_NAME") else "❌ Not Set"

    return response


# Session endpoints
@app.post("/session", status_code=201)
def create_session(store: Store = Depends(get_store)):
    session = store.create_session()
    return {"session_id": session.id}


@app.get("/session", response_model=SessionState)
def get_session(session_id: str = Depends(get_session_id), store: Store = Depends(get_store)):
    return store.session(session_id)


@app.put("/session/filters", response_model=SessionState)
def set_filters(filters: FilterState, session_id: str = Depends(get_session_id), store: Store = Depends(get_store)):
    return store.set_filters(session_id, filters)


@app.post("/session/filters/brands/{brand}", response_model=SessionState)
def toggle_brand_filter(brand: str, session_id: str = Depends(get_session_id), store: Store = Depends(get_store)):
    return store.toggle_brand_filter(session_id, brand)


@app.get("/session/products")
def list_session_products(session_id: str = Depends(get_session_id), store: Store = Depends(get_store)):
    return store.session_products(session_id)


# Auth endpoints
@app.post("/auth/signup")
async def signup(payload: SignUpIn, session_id: str = Depends(get_session_id), store: Store = Depends(get_store)):
    session = await store.sign_up(session_id, payload)
    return auth_response(session, store)


@app.post("/auth/signin")
async def signin(payload: SignInIn, session_id: str = Depends(get_session_id), store: Store = Depends(get_store)):
    session = await store.sign_in(session_id, payload)
    return auth_response(session, store)


@app.post("/auth/google")
async def google_signin(session_id: str = Depends(get_session_id), store: Store = Depends(get_store)):
    session = await store.google_sign_in(session_id)
    return auth_response(session, store)


@app.post("/auth/logout", response_model=SessionState)
def logout(session_id: str = Depends(get_session_id), store: Store = Depends(get_store)):
    return store.sign_out(session_id)


# Product endpoints
@app.get("/products")
def list_products(
    search: str = "",
    category: Category = Category.ALL,
    sort_by: SortOption = SortOption.FEATURED,
    availability: Availability = Availability.ALL,
    brands: List[str] = Query(default=[]),
    store: Store = Depends(get_store),
):
    filters = FilterState(
        search=search,
        category=category,
        sort_by=sort_by,
        availability=availability,
        brands=brands,
    )
    return store.visible_products(filters)


@app.get("/brands")
def list_brands(store: Store = Depends(get_store)):
    return store.brands()


@app.get("/products/{product_id}")
def get_product(product_id: str, store: Store = Depends(get_store)):
    return store.product(product_id)


@app.get("/products/{product_id}/reviews")
def list_reviews(product_id: str, store: Store = Depends(get_store)):
    return store.reviews_for(product_id)


@app.post("/products/{product_id}/reviews", status_code=201)
async def create_review(product_id: str, payload: ReviewIn, store: Store = Depends(get_store)):
    return await store.add_review(product_id, payload)


# Cart endpoints (per-session)
@app.get("/cart")
def get_cart(session_id: str = Depends(get_session_id), store: Store = Depends(get_store)):
    return store.session(session_id).cart


@app.post("/cart/items")
def add_to_cart(payload: CartItemIn, session_id: str = Depends(get_session_id), store: Store = Depends(get_store)):
    session = store.add_to_cart(session_id, payload.product_id)
    return {"cart": session.cart, "cart_open": session.cart_open}


@app.patch("/cart/items/{product_id}")
def update_cart_item(
    product_id: str,
    payload: QuantityIn,
    session_id: str = Depends(get_session_id),
    store: Store = Depends(get_store),
):
    return store.update_quantity(session_id, product_id, payload.delta).cart


@app.delete("/cart/items/{product_id}")
def remove_from_cart(product_id: str, session_id: str = Depends(get_session_id), store: Store = Depends(get_store)):
    return store.remove_from_cart(session_id, product_id).cart


@app.post("/cart/close")
def close_cart(session_id: str = Depends(get_session_id), store: Store = Depends(get_store)):
    return {"cart_open": store.close_cart(session_id).cart_open}


# Wishlist endpoints
@app.get("/wishlist")
def get_wishlist(session_id: str = Depends(get_session_id), store: Store = Depends(get_store)):
    return store.session(session_id).wishlist


@app.post("/wishlist/{product_id}/toggle")
def toggle_wishlist(product_id: str, session_id: str = Depends(get_session_id), store: Store = Depends(get_store)):
    return store.toggle_wishlist(session_id, product_id).wishlist


# Checkout / Orders
@app.post("/checkout", status_code=201)
async def checkout(session_id: str = Depends(get_session_id), store: Store = Depends(get_store)):
    return await store.checkout(session_id)


@app.get("/orders")
def list_orders(session_id: str = Depends(get_session_id), store: Store = Depends(get_store)):
    return store.orders_for(session_id)


@app.get("/orders/{order_id}/invoice", response_class=PlainTextResponse)
def download_invoice(order_id: str, session_id: str = Depends(get_session_id), store: Store = Depends(get_store)):
    content = store.invoice(session_id, order_id)
    return PlainTextResponse(
        content,
        headers={"Content-Disposition": f'attachment; filename="Invoice_{order_id}.txt"'},
    )


# Admin endpoints
@app.post("/admin/products", status_code=201, dependencies=[Depends(require_admin)])
def admin_create_product(payload: ProductIn, store: Store = Depends(get_store)):
    return store.create_product(payload)


@app.put("/admin/products/{product_id}", dependencies=[Depends(require_admin)])
def admin_update_product(product_id: str, payload: ProductUpdate, store: Store = Depends(get_store)):
    return store.update_product(product_id, payload)


@app.delete("/admin/products/{product_id}", dependencies=[Depends(require_admin)])
def admin_delete_product(product_id: str, store: Store = Depends(get_store)):
    store.delete_product(product_id)
    return {"deleted": True}


@app.get("/admin/orders", dependencies=[Depends(require_admin)])
def admin_list_orders(store: Store = Depends(get_store)):
    return store.orders


@app.patch("/admin/orders/{order_id}/status", dependencies=[Depends(require_admin)])
def admin_update_order_status(order_id: str, payload: OrderStatusIn, store: Store = Depends(get_store)):
    return store.update_order_status(order_id, payload.status)


@app.get("/admin/analytics", dependencies=[Depends(require_admin)])
def admin_analytics(store: Store = Depends(get_store)):
    return store.analytics()


# Document-store product endpoints (not used by the storefront itself)
@app.get("/api/products")
def list_stored_products(limit: int = 100):
    if database.db is None:
        raise HTTPException(status_code=500, detail="Database not configured")
    docs = database.get_documents("product", {}, limit)
    for d in docs:
        d["id"] = str(d.pop("_id"))
    return docs


@app.post("/api/products", status_code=201)
def create_stored_product(payload: ProductIn):
    if database.db is None:
        raise HTTPException(status_code=500, detail="Database not configured")
    pid = database.create_document("product", payload)
    return {"id": pid, **payload.model_dump(mode="json")}


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
