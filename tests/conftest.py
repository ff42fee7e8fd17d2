import os

# Must run before orderdesk.config is imported anywhere
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ENV", "test")

import pytest
from sqlalchemy.orm import sessionmaker

from orderdesk.db import Base, make_engine
import orderdesk.models  # noqa: F401
from orderdesk.models.catalog import Customer, Product
from orderdesk.repositories.orders import OrderRepository
from orderdesk.repositories.temp_orders import TempOrderRepository
from orderdesk.services.active_order import ActiveOrderGuard
from orderdesk.services.directories import (
    SqlCustomerDirectory,
    SqlProductCatalog,
    SqlShopDirectory,
    create_shop,
)
from orderdesk.services.merge import MergeCoordinator
from orderdesk.services.orders import OrderLifecycleService
from orderdesk.services.temp_orders import TempOrderLifecycleService


@pytest.fixture()
def engine():
    engine = make_engine("sqlite://")
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)


@pytest.fixture()
def seed(session_factory):
    """Create shops, customers and products; returns a namespace of their ids."""

    class Seed:
        pass

    data = Seed()
    with session_factory.begin() as db:
        shop = create_shop(db, "Toko Satu", share_token="abc")
        other_shop = create_shop(db, "Toko Dua", share_token="xyz")

        jane = Customer(shop_id=shop.id, name="Jane", phone="+628111")
        budi = Customer(shop_id=shop.id, name="Budi", phone="+628222")
        stranger = Customer(shop_id=other_shop.id, name="Stranger", phone="+628999")

        rice = Product(shop_id=shop.id, name="Rice 5kg", price=1000)
        oil = Product(shop_id=shop.id, name="Cooking oil", price=2500)
        sugar = Product(shop_id=shop.id, name="Sugar", price=700)
        foreign = Product(shop_id=other_shop.id, name="Coffee", price=4000)

        db.add_all([jane, budi, stranger, rice, oil, sugar, foreign])
        db.flush()

        data.shop_id = shop.id
        data.other_shop_id = other_shop.id
        data.jane_id = jane.id
        data.budi_id = budi.id
        data.stranger_id = stranger.id
        data.rice_id = rice.id
        data.oil_id = oil.id
        data.sugar_id = sugar.id
        data.foreign_product_id = foreign.id
    return data


@pytest.fixture()
def order_repo(session_factory):
    return OrderRepository(session_factory)


@pytest.fixture()
def temp_order_repo(session_factory):
    return TempOrderRepository(session_factory)


@pytest.fixture()
def guard(order_repo):
    return ActiveOrderGuard(order_repo)


@pytest.fixture()
def order_service(session_factory, order_repo, guard):
    return OrderLifecycleService(
        session_factory,
        orders=order_repo,
        guard=guard,
        products=SqlProductCatalog(),
        customers=SqlCustomerDirectory(),
    )


@pytest.fixture()
def temp_order_service(session_factory, temp_order_repo):
    return TempOrderLifecycleService(
        session_factory,
        temp_orders=temp_order_repo,
        shops=SqlShopDirectory(),
        products=SqlProductCatalog(),
    )


@pytest.fixture()
def merge_coordinator(session_factory, order_repo, temp_order_repo, guard):
    return MergeCoordinator(
        session_factory,
        orders=order_repo,
        temp_orders=temp_order_repo,
        guard=guard,
        customers=SqlCustomerDirectory(),
    )
