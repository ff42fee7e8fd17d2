"""Tests for TempOrderRepository."""

from orderdesk.models.temp_order import TempOrder, TempOrderItem
from orderdesk.repositories.base import OrderFilters
from orderdesk.repositories.temp_orders import TempOrderChanges


def _temp_order(repo, seed, name="Jane", phone="+628123"):
    return repo.create_temp_order(seed.shop_id, name, phone)


class TestTempOrderRepository:
    def test_create_is_pending_with_zero_total(self, temp_order_repo, seed):
        temp_order = _temp_order(temp_order_repo, seed)

        assert temp_order.status == "pending"
        assert temp_order.total_price == 0
        assert temp_order.updated_at is None

    def test_get_scoped_by_shop(self, temp_order_repo, seed):
        temp_order = _temp_order(temp_order_repo, seed)

        assert temp_order_repo.get_temp_order(temp_order.id, seed.shop_id) is not None
        assert temp_order_repo.get_temp_order(temp_order.id, seed.other_shop_id) is None
        assert temp_order_repo.get_temp_order(9999) is None

    def test_items_keep_their_snapshot(self, temp_order_repo, seed):
        temp_order = _temp_order(temp_order_repo, seed)
        temp_order_repo.add_item(temp_order.id, seed.rice_id, 2, 1000, "Rice 5kg")

        [item] = temp_order_repo.list_items(temp_order.id)
        assert (item.product_id, item.product_name, item.price, item.qty) == (
            seed.rice_id, "Rice 5kg", 1000, 2,
        )

    def test_update_status_stamps_updated_at(self, temp_order_repo, seed):
        temp_order = _temp_order(temp_order_repo, seed)

        updated = temp_order_repo.update_temp_order(
            temp_order.id, TempOrderChanges(status="rejected")
        )
        assert updated.status == "rejected"
        assert updated.updated_at is not None

    def test_update_without_touch(self, temp_order_repo, seed):
        temp_order = _temp_order(temp_order_repo, seed)

        updated = temp_order_repo.update_temp_order(
            temp_order.id, TempOrderChanges(total_price=10), touch=False
        )
        assert updated.total_price == 10
        assert updated.updated_at is None

    def test_list_with_search(self, temp_order_repo, seed):
        jane = _temp_order(temp_order_repo, seed, "Jane", "+628111")
        _temp_order(temp_order_repo, seed, "Budi", "+628222")

        found = temp_order_repo.list_temp_orders(seed.shop_id, OrderFilters(search="JANE"))
        assert [t.id for t in found] == [jane.id]
        assert temp_order_repo.list_temp_orders(seed.other_shop_id) == []

    def test_delete_removes_items(self, temp_order_repo, session_factory, seed):
        temp_order = _temp_order(temp_order_repo, seed)
        temp_order_repo.add_item(temp_order.id, seed.rice_id, 1, 1000, "Rice 5kg")

        assert temp_order_repo.delete_temp_order(temp_order.id) is True

        with session_factory() as db:
            assert db.query(TempOrder).count() == 0
            assert db.query(TempOrderItem).count() == 0
