from schemas import Product, Wishlist


def contains(wishlist: Wishlist, product_id: str) -> bool:
    return any(p.id == product_id for p in wishlist.items)


def toggle(wishlist: Wishlist, product: Product) -> Wishlist:
    if contains(wishlist, product.id):
        return Wishlist(items=tuple(p for p in wishlist.items if p.id != product.id))
    return Wishlist(items=(*wishlist.items, product))
