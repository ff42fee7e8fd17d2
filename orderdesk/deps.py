"""FastAPI dependencies: wiring of services and request scope.

Every request gets freshly constructed services bound to the session factory;
tests swap the factory through ``app.dependency_overrides``.
"""
from fastapi import Depends, Header
from sqlalchemy.orm import sessionmaker

from orderdesk.db import SessionLocal
from orderdesk.repositories.orders import OrderRepository
from orderdesk.repositories.temp_orders import TempOrderRepository
from orderdesk.services.active_order import ActiveOrderGuard
from orderdesk.services.directories import (
    SqlCustomerDirectory,
    SqlProductCatalog,
    SqlShopDirectory,
)
from orderdesk.services.merge import MergeCoordinator
from orderdesk.services.orders import OrderLifecycleService
from orderdesk.services.temp_orders import TempOrderLifecycleService


def get_session_factory() -> sessionmaker:
    return SessionLocal


def get_shop_id(x_shop_id: int = Header(..., gt=0)) -> int:
    # TODO: take the shop from the authenticated user once token auth lands
    return x_shop_id


def get_order_service(
    session_factory: sessionmaker = Depends(get_session_factory),
) -> OrderLifecycleService:
    orders = OrderRepository(session_factory)
    return OrderLifecycleService(
        session_factory,
        orders=orders,
        guard=ActiveOrderGuard(orders),
        products=SqlProductCatalog(),
        customers=SqlCustomerDirectory(),
    )


def get_temp_order_service(
    session_factory: sessionmaker = Depends(get_session_factory),
) -> TempOrderLifecycleService:
    return TempOrderLifecycleService(
        session_factory,
        temp_orders=TempOrderRepository(session_factory),
        shops=SqlShopDirectory(),
        products=SqlProductCatalog(),
    )


def get_merge_coordinator(
    session_factory: sessionmaker = Depends(get_session_factory),
) -> MergeCoordinator:
    orders = OrderRepository(session_factory)
    return MergeCoordinator(
        session_factory,
        orders=orders,
        temp_orders=TempOrderRepository(session_factory),
        guard=ActiveOrderGuard(orders),
        customers=SqlCustomerDirectory(),
    )
