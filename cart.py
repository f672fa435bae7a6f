"""
Cart aggregation.

Each operation takes a Cart and returns a new one. item_count and subtotal
live on the Cart model as computed fields, so they always reflect the items.
"""
from schemas import Cart, CartItem, Product


def add_item(cart: Cart, product: Product) -> Cart:
    if any(item.id == product.id for item in cart.items):
        items = tuple(
            item.model_copy(update={"quantity": item.quantity + 1}) if item.id == product.id else item
            for item in cart.items
        )
        return Cart(items=items)
    return Cart(items=(*cart.items, CartItem(product=product, quantity=1)))


def update_quantity(cart: Cart, product_id: str, delta: int) -> Cart:
    # Never below 1; remove_item() is the only way out of the cart
    items = tuple(
        item.model_copy(update={"quantity": max(1, item.quantity + delta)}) if item.id == product_id else item
        for item in cart.items
    )
    return Cart(items=items)


def remove_item(cart: Cart, product_id: str) -> Cart:
    return Cart(items=tuple(item for item in cart.items if item.id != product_id))


def clear(cart: Cart) -> Cart:
    return Cart()


def find_item(cart: Cart, product_id: str):
    return next((item for item in cart.items if item.id == product_id), None)
