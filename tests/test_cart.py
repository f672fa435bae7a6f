import cart
import wishlist
from schemas import Cart, Wishlist


def test_adding_same_product_twice_increments_quantity(stethoscope):
    c = cart.add_item(cart.add_item(Cart(), stethoscope), stethoscope)
    assert len(c.items) == 1
    assert c.items[0].quantity == 2
    assert c.item_count == 2


def test_cart_scenario_subtotal(stethoscope, gel):
    c = cart.add_item(cart.add_item(Cart(), stethoscope), gel)
    c = cart.update_quantity(c, gel.id, +2)
    assert [(i.product.name, i.quantity) for i in c.items] == [("Stethoscope", 1), ("Gel", 3)]
    assert c.subtotal == 339
    assert c.item_count == 4


def test_update_quantity_never_below_one(gel):
    c = cart.add_item(Cart(), gel)
    c = cart.update_quantity(c, gel.id, -100)
    assert c.items[0].quantity == 1


def test_update_quantity_unknown_id_is_noop(gel):
    c = cart.add_item(Cart(), gel)
    assert cart.update_quantity(c, "missing", 3) == c


def test_remove_item(stethoscope, gel):
    c = cart.add_item(cart.add_item(Cart(), stethoscope), gel)
    c = cart.remove_item(c, stethoscope.id)
    assert [i.id for i in c.items] == [gel.id]
    assert cart.remove_item(c, "missing") == c


def test_operations_return_new_carts(stethoscope):
    empty = Cart()
    one = cart.add_item(empty, stethoscope)
    two = cart.add_item(one, stethoscope)
    assert empty.items == ()
    assert one.items[0].quantity == 1
    assert two.items[0].quantity == 2


def test_totals_follow_current_items(stethoscope, gel):
    c = cart.add_item(cart.add_item(Cart(), stethoscope), gel)
    assert c.subtotal == 313
    c = cart.update_quantity(c, stethoscope.id, 1)
    assert c.subtotal == 613
    c = cart.remove_item(c, stethoscope.id)
    assert c.subtotal == 13
    assert cart.clear(c).subtotal == 0
    assert cart.clear(c).is_empty()


def test_wishlist_toggle(stethoscope, gel):
    w = wishlist.toggle(Wishlist(), stethoscope)
    w = wishlist.toggle(w, gel)
    assert [p.id for p in w.items] == [stethoscope.id, gel.id]
    assert wishlist.contains(w, gel.id)

    w = wishlist.toggle(w, stethoscope)
    assert [p.id for p in w.items] == [gel.id]
    assert w.count == 1
