"""
Schemas for the Khemixall medical-supply storefront

Every model here is an immutable value: engine functions take one and return a
new one instead of mutating it in place. The stub document store keeps products
in the "product" collection using the Product field layout.
"""
from datetime import datetime
from enum import Enum
from typing import Annotated, List, Optional, Tuple

from pydantic import BaseModel, BeforeValidator, ConfigDict, EmailStr, Field, computed_field, field_validator

DEFAULT_PRODUCT_IMAGE = "https://images.unsplash.com/photo-1631217868264-e5b90bb7e133?auto=format&fit=crop&w=800&q=80"


# -----------
# Enumerations
# -----------

class Category(str, Enum):
    ALL = "All"
    PHARMACEUTICALS = "Pharmaceuticals"
    EQUIPMENT = "Medical Equipment"
    SUPPLIES = "First Aid & Supplies"
    WELLNESS = "Wellness & Vitamins"


class SortOption(str, Enum):
    FEATURED = "featured"
    PRICE_ASC = "price-asc"
    PRICE_DESC = "price-desc"
    RATING = "rating"


class Availability(str, Enum):
    ALL = "all"
    IN_STOCK = "in-stock"
    OUT_OF_STOCK = "out-of-stock"


class OrderStatus(str, Enum):
    PENDING = "Pending"
    PROCESSING = "Processing"
    SHIPPED = "Shipped"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"


class ReviewOrigin(str, Enum):
    USER = "user"
    SEEDED = "seeded"


class CheckoutStage(str, Enum):
    IDLE = "idle"
    PROCESSING = "processing"
    CONFIRMED = "confirmed"


class PaymentStatus(str, Enum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"


# -------
# Catalog
# -------

def _split_features(value):
    if isinstance(value, str):
        return [f.strip() for f in value.split(",") if f.strip()]
    return value


FeatureTags = Annotated[List[str], BeforeValidator(_split_features)]


class Product(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str = ""
    price: float = Field(..., ge=0)
    category: Category
    image: str = DEFAULT_PRODUCT_IMAGE
    rating: float = Field(0, ge=0, le=5)
    reviews: int = Field(0, ge=0, description="Number of reviews")
    in_stock: bool = True
    brand: str = ""
    features: FeatureTags = Field(default_factory=list)

    @field_validator("category")
    @classmethod
    def category_is_concrete(cls, v: Category) -> Category:
        if v == Category.ALL:
            raise ValueError("'All' is a filter value, not a product category")
        return v


class ProductIn(BaseModel):
    name: str = Field(..., min_length=1)
    description: str = ""
    price: float = Field(..., ge=0)
    category: Category = Category.EQUIPMENT
    image: str = DEFAULT_PRODUCT_IMAGE
    in_stock: bool = True
    brand: str = ""
    features: FeatureTags = Field(default_factory=list)


class ProductUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    category: Optional[Category] = None
    image: Optional[str] = None
    in_stock: Optional[bool] = None
    brand: Optional[str] = None
    features: Optional[FeatureTags] = None
    rating: Optional[float] = Field(None, ge=0, le=5)
    reviews: Optional[int] = Field(None, ge=0)


class FilterState(BaseModel):
    model_config = ConfigDict(frozen=True)

    search: str = ""
    category: Category = Category.ALL
    sort_by: SortOption = SortOption.FEATURED
    availability: Availability = Availability.ALL
    brands: List[str] = Field(default_factory=list)


# ------------------
# Cart and Wishlist
# ------------------

class CartItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    product: Product
    quantity: int = Field(1, ge=1)

    @property
    def id(self) -> str:
        return self.product.id

    @computed_field
    @property
    def line_total(self) -> float:
        return self.product.price * self.quantity


class Cart(BaseModel):
    model_config = ConfigDict(frozen=True)

    items: Tuple[CartItem, ...] = ()

    @computed_field
    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)

    @computed_field
    @property
    def subtotal(self) -> float:
        return sum((item.product.price * item.quantity for item in self.items), 0.0)

    def is_empty(self) -> bool:
        return not self.items


class Wishlist(BaseModel):
    model_config = ConfigDict(frozen=True)

    items: Tuple[Product, ...] = ()

    @computed_field
    @property
    def count(self) -> int:
        return len(self.items)


# -----
# Users
# -----

class Address(BaseModel):
    model_config = ConfigDict(frozen=True)

    street: str = ""
    city: str = ""
    state: str = ""
    zip: str = ""
    country: str = ""


class User(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    email: EmailStr
    is_admin: bool = False
    address: Optional[Address] = None
    phone: Optional[str] = None
    password_hash: Optional[str] = Field(None, exclude=True)


class SignUpIn(BaseModel):
    name: str = ""
    email: str = ""
    password: str = ""


class SignInIn(BaseModel):
    email: str = ""
    password: str = ""


class AuthResult(BaseModel):
    user: Optional[User] = None
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.user is not None


# ------
# Orders
# ------

class Order(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., pattern=r"^KMX-\d{6}$")
    user_id: str
    items: Tuple[CartItem, ...]
    subtotal: float = Field(..., ge=0)
    tax: float = Field(..., ge=0)
    shipping: float = Field(0, ge=0)
    total: float = Field(..., ge=0)
    date: datetime
    status: OrderStatus = OrderStatus.PENDING
    shipping_address: Address
    payment_method: str = "Credit Card"


class OrderStatusIn(BaseModel):
    status: OrderStatus


class PaymentResult(BaseModel):
    status: PaymentStatus
    order: Optional[Order] = None
    reason: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.status == PaymentStatus.SUCCEEDED


class Analytics(BaseModel):
    total_revenue: float
    total_orders: int
    pending_orders: int
    average_order_value: float


# -------
# Reviews
# -------

class Review(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    product_id: str
    author: str = Field(..., min_length=1)
    rating: int = Field(5, ge=1, le=5)
    date: str = "Just now"
    title: Optional[str] = None
    text: str = Field(..., min_length=1)
    origin: ReviewOrigin = ReviewOrigin.USER


class ReviewIn(BaseModel):
    author: str = Field(..., min_length=1)
    rating: int = Field(5, ge=1, le=5)
    title: Optional[str] = None
    text: str = Field(..., min_length=1)


# -------
# Session
# -------

class CartItemIn(BaseModel):
    product_id: str


class QuantityIn(BaseModel):
    delta: int


class SessionState(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    user: Optional[User] = None
    cart: Cart = Field(default_factory=Cart)
    cart_open: bool = False
    wishlist: Wishlist = Field(default_factory=Wishlist)
    filters: FilterState = Field(default_factory=FilterState)
    checkout_stage: CheckoutStage = CheckoutStage.IDLE
    pending_checkout: bool = False
    last_order: Optional[Order] = None

