"""Tests for OrderRepository against an in-memory database."""

from datetime import datetime, timedelta

import pytest

from orderdesk.errors import ActiveOrderExists, RepositoryError
from orderdesk.models.order import Order, OrderItem
from orderdesk.repositories.base import OrderFilters
from orderdesk.repositories.orders import OrderChanges, OrderItemChanges


class TestCreateAndRead:
    def test_create_order_defaults(self, order_repo, seed):
        order = order_repo.create_order(seed.jane_id, seed.shop_id, "call first")

        assert order.id is not None
        assert order.status == "created"
        assert order.total_price == 0
        assert order.notes == "call first"
        assert order.updated_at is None

    def test_missing_notes_stored_empty(self, order_repo, seed):
        order = order_repo.create_order(seed.jane_id, seed.shop_id)
        assert order.notes == ""

    def test_get_order_returns_none_when_missing(self, order_repo, seed):
        assert order_repo.get_order(999) is None

    def test_get_order_scoped_by_shop(self, order_repo, seed):
        order = order_repo.create_order(seed.jane_id, seed.shop_id)

        assert order_repo.get_order(order.id, seed.shop_id) is not None
        assert order_repo.get_order(order.id, seed.other_shop_id) is None

    def test_customer_name_is_denormalised(self, order_repo, session_factory, seed):
        order = order_repo.create_order(seed.jane_id, seed.shop_id)
        with session_factory() as db:
            assert order_repo.get_order(order.id, db=db).customer_name == "Jane"


class TestActiveOrderIndex:
    def test_second_active_order_is_rejected_by_the_database(self, order_repo, seed):
        order_repo.create_order(seed.jane_id, seed.shop_id)

        with pytest.raises(ActiveOrderExists):
            order_repo.create_order(seed.jane_id, seed.shop_id)

    def test_closed_orders_do_not_count(self, order_repo, seed):
        first = order_repo.create_order(seed.jane_id, seed.shop_id)
        order_repo.update_order(first.id, OrderChanges(status="completed"))

        second = order_repo.create_order(seed.jane_id, seed.shop_id)
        assert second.id != first.id

    def test_other_customers_and_shops_are_independent(self, order_repo, seed):
        order_repo.create_order(seed.jane_id, seed.shop_id)
        order_repo.create_order(seed.budi_id, seed.shop_id)
        order_repo.create_order(seed.stranger_id, seed.other_shop_id)

    def test_reopening_while_another_is_active(self, order_repo, seed):
        first = order_repo.create_order(seed.jane_id, seed.shop_id)
        order_repo.update_order(first.id, OrderChanges(status="cancelled"))
        order_repo.create_order(seed.jane_id, seed.shop_id)

        with pytest.raises(ActiveOrderExists):
            order_repo.update_order(first.id, OrderChanges(status="in_progress"))

    def test_get_active_order_picks_open_one(self, order_repo, seed):
        done = order_repo.create_order(seed.jane_id, seed.shop_id)
        order_repo.update_order(done.id, OrderChanges(status="completed"))
        open_order = order_repo.create_order(seed.jane_id, seed.shop_id)

        active = order_repo.get_active_order(seed.jane_id, seed.shop_id)
        assert active.id == open_order.id
        assert order_repo.get_active_order(seed.budi_id, seed.shop_id) is None


class TestUpdateOrder:
    def test_partial_update_leaves_other_fields(self, order_repo, seed):
        order = order_repo.create_order(seed.jane_id, seed.shop_id, "keep me")

        updated = order_repo.update_order(order.id, OrderChanges(total_price=4200))

        assert updated.total_price == 4200
        assert updated.notes == "keep me"
        assert updated.status == "created"
        assert updated.updated_at is not None

    def test_values_are_bound_not_interpolated(self, order_repo, seed):
        order = order_repo.create_order(seed.jane_id, seed.shop_id)
        notes = "it's fine'; DROP TABLE orders; --"

        updated = order_repo.update_order(order.id, OrderChanges(notes=notes))

        assert updated.notes == notes
        assert order_repo.get_order(order.id) is not None

    def test_update_missing_order(self, order_repo, seed):
        assert order_repo.update_order(404, OrderChanges(notes="x")) is None


class TestItems:
    def test_add_and_list_items(self, order_repo, seed):
        order = order_repo.create_order(seed.jane_id, seed.shop_id)
        order_repo.add_item(order.id, seed.rice_id, 2, 1000, "Rice 5kg")
        order_repo.add_item(order.id, seed.oil_id, 1, 2500, "Cooking oil")

        items = order_repo.list_items(order.id)
        assert [(i.product_name, i.price, i.qty) for i in items] == [
            ("Rice 5kg", 1000, 2),
            ("Cooking oil", 2500, 1),
        ]

    def test_update_item(self, order_repo, seed):
        order = order_repo.create_order(seed.jane_id, seed.shop_id)
        item = order_repo.add_item(order.id, seed.rice_id, 2, 1000, "Rice 5kg")

        updated = order_repo.update_item(item.id, order.id, OrderItemChanges(qty=5))

        assert updated.qty == 5
        assert updated.price == 1000
        assert updated.updated_at is not None

    def test_update_item_of_other_order(self, order_repo, seed):
        order = order_repo.create_order(seed.jane_id, seed.shop_id)
        other = order_repo.create_order(seed.budi_id, seed.shop_id)
        item = order_repo.add_item(order.id, seed.rice_id, 2, 1000, "Rice 5kg")

        assert order_repo.update_item(item.id, other.id, OrderItemChanges(qty=1)) is None

    def test_delete_item(self, order_repo, seed):
        order = order_repo.create_order(seed.jane_id, seed.shop_id)
        item = order_repo.add_item(order.id, seed.rice_id, 2, 1000, "Rice 5kg")

        assert order_repo.delete_item(item.id, order.id) is True
        assert order_repo.delete_item(item.id, order.id) is False
        assert order_repo.list_items(order.id) == []

    def test_zero_qty_violates_check_constraint(self, order_repo, seed):
        order = order_repo.create_order(seed.jane_id, seed.shop_id)
        with pytest.raises(RepositoryError):
            order_repo.add_item(order.id, seed.rice_id, 0, 1000, "Rice 5kg")


class TestDeleteOrder:
    def test_delete_cascades_to_items(self, order_repo, session_factory, seed):
        order = order_repo.create_order(seed.jane_id, seed.shop_id)
        order_repo.add_item(order.id, seed.rice_id, 2, 1000, "Rice 5kg")

        assert order_repo.delete_order(order.id) is True

        with session_factory() as db:
            assert db.query(Order).count() == 0
            assert db.query(OrderItem).count() == 0

    def test_delete_missing(self, order_repo, seed):
        assert order_repo.delete_order(12345) is False

    def test_runs_inside_caller_transaction(self, order_repo, session_factory, seed):
        order = order_repo.create_order(seed.jane_id, seed.shop_id)

        db = session_factory()
        db.begin()
        order_repo.delete_order(order.id, db=db)
        db.rollback()
        db.close()

        assert order_repo.get_order(order.id) is not None


class TestListOrders:
    def test_filters(self, order_repo, seed):
        jane = order_repo.create_order(seed.jane_id, seed.shop_id)
        budi = order_repo.create_order(seed.budi_id, seed.shop_id)
        order_repo.create_order(seed.stranger_id, seed.other_shop_id)

        ids = lambda orders: {o.id for o in orders}

        assert ids(order_repo.list_orders(seed.shop_id)) == {jane.id, budi.id}
        assert ids(order_repo.list_orders(seed.shop_id, OrderFilters(search="jan"))) == {jane.id}
        assert ids(order_repo.list_orders(seed.shop_id, OrderFilters(search="8222"))) == {budi.id}

        tomorrow = datetime.utcnow() + timedelta(days=1)
        assert order_repo.list_orders(seed.shop_id, OrderFilters(date_from=tomorrow)) == []
        assert ids(order_repo.list_orders(seed.shop_id, OrderFilters(date_to=tomorrow))) == {jane.id, budi.id}

    def test_status_filter(self, order_repo, seed):
        jane = order_repo.create_order(seed.jane_id, seed.shop_id)
        order_repo.create_order(seed.budi_id, seed.shop_id)
        order_repo.update_order(jane.id, OrderChanges(status="in_progress"))

        found = order_repo.list_orders(seed.shop_id, OrderFilters(status="in_progress"))
        assert [o.id for o in found] == [jane.id]

    def test_status_filter_matches_legacy_rows(self, order_repo, seed):
        old = order_repo.create_order(seed.jane_id, seed.shop_id)
        order_repo.update_order(old.id, OrderChanges(status="done"))
        new = order_repo.create_order(seed.jane_id, seed.shop_id)
        order_repo.update_order(new.id, OrderChanges(status="completed"))

        for status in ("completed", "done"):
            found = order_repo.list_orders(seed.shop_id, OrderFilters(status=status))
            assert {o.id for o in found} == {old.id, new.id}
