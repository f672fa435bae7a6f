"""
Catalog projection and admin catalog mutations.

filter_products() is a pure projection of (products, filters); nothing here
mutates its inputs. Mutations return a new product list.
"""
import uuid
from typing import Callable, Iterable, List, Optional, Sequence

import structlog

from errors import ProductNotFound
from schemas import Availability, Category, FilterState, Product, ProductIn, ProductUpdate, SortOption

logger = structlog.get_logger(__name__)


# -----------
# Predicates
# -----------

def matches_search(product: Product, term: str) -> bool:
    term = term.lower().strip()
    if term == "":
        return True
    return (
        term in product.name.lower()
        or term in product.description.lower()
        or term in product.brand.lower()
        or any(term in f.lower() for f in product.features)
    )


def matches_category(product: Product, category: Category) -> bool:
    return category == Category.ALL or product.category == category


def matches_availability(product: Product, availability: Availability) -> bool:
    if availability == Availability.IN_STOCK:
        return product.in_stock
    if availability == Availability.OUT_OF_STOCK:
        return not product.in_stock
    return True


def matches_brands(product: Product, brands: Iterable[str]) -> bool:
    brands = set(brands)
    return not brands or product.brand in brands


def matches(product: Product, filters: FilterState) -> bool:
    return (
        matches_search(product, filters.search)
        and matches_category(product, filters.category)
        and matches_availability(product, filters.availability)
        and matches_brands(product, filters.brands)
    )


# ---------------
# Filter and sort
# ---------------

def sort_products(products: Sequence[Product], sort_by: SortOption) -> List[Product]:
    # sorted() is stable, including with reverse=True
    if sort_by == SortOption.PRICE_ASC:
        return sorted(products, key=lambda p: p.price)
    if sort_by == SortOption.PRICE_DESC:
        return sorted(products, key=lambda p: p.price, reverse=True)
    if sort_by == SortOption.RATING:
        return sorted(products, key=lambda p: p.rating, reverse=True)
    return list(products)


def filter_products(products: Sequence[Product], filters: FilterState) -> List[Product]:
    """Return the visible catalog for ``filters``.

    Every active predicate must hold (search, category, availability, brand);
    the survivors are then sorted stably by ``filters.sort_by``.
    """
    return sort_products([p for p in products if matches(p, filters)], filters.sort_by)


def unique_brands(products: Iterable[Product]) -> List[str]:
    return sorted({p.brand for p in products})


def toggle_brand(filters: FilterState, brand: str) -> FilterState:
    if brand in filters.brands:
        brands = [b for b in filters.brands if b != brand]
    else:
        brands = [*filters.brands, brand]
    return filters.model_copy(update={"brands": brands})


def find_product(products: Iterable[Product], product_id: str) -> Optional[Product]:
    return next((p for p in products if p.id == product_id), None)


def get_product(products: Iterable[Product], product_id: str) -> Product:
    product = find_product(products, product_id)
    if product is None:
        raise ProductNotFound(f"Product not found: {product_id}")
    return product


# ----------------
# Admin mutations
# ----------------

def new_product_id() -> str:
    return uuid.uuid4().hex[:12]


def create_product(
    products: Sequence[Product],
    payload: ProductIn,
    id_factory: Callable[[], str] = new_product_id,
) -> List[Product]:
    product = Product(id=id_factory(), rating=0, reviews=0, **payload.model_dump())
    logger.info("product_created", product_id=product.id, name=product.name)
    return [product, *products]


def update_product(products: Sequence[Product], product_id: str, updates: ProductUpdate) -> List[Product]:
    current = get_product(products, product_id)
    changes = updates.model_dump(exclude_unset=True, exclude_none=True)
    merged = Product(**{**current.model_dump(), **changes})
    logger.info("product_updated", product_id=product_id, fields=sorted(changes))
    return [merged if p.id == product_id else p for p in products]


def delete_product(products: Sequence[Product], product_id: str) -> List[Product]:
    remaining = [p for p in products if p.id != product_id]
    if len(remaining) == len(products):
        raise ProductNotFound(f"Product not found: {product_id}")
    logger.info("product_deleted", product_id=product_id)
    return remaining
