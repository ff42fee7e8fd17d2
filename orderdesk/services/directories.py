"""Lookups the order core needs from the rest of the system.

Products, shops and customers are owned elsewhere; the core only sees these
narrow interfaces. The ``Sql*`` classes are the default implementations on
top of the shared tables.
"""
from typing import NamedTuple, Optional, Protocol

from sqlalchemy.orm import Session

from orderdesk.models.catalog import Customer, Product, Shop
from orderdesk.utils.tokens import make_share_token


class ProductSnapshot(NamedTuple):
    id: int
    name: str
    price: int


class ProductCatalog(Protocol):
    def get_product(self, product_id: int, shop_id: int, db: Session) -> Optional[ProductSnapshot]:
        ...


class ShopDirectory(Protocol):
    def resolve_share_token(self, token: str, db: Session) -> Optional[int]:
        ...


class CustomerDirectory(Protocol):
    def customer_exists(self, customer_id: int, shop_id: int, db: Session) -> bool:
        ...


class SqlProductCatalog:
    def get_product(self, product_id: int, shop_id: int, db: Session) -> Optional[ProductSnapshot]:
        product = (
            db.query(Product)
            .filter(Product.id == product_id, Product.shop_id == shop_id)
            .first()
        )
        if not product:
            return None
        return ProductSnapshot(id=product.id, name=product.name, price=int(product.price))


class SqlShopDirectory:
    def resolve_share_token(self, token: str, db: Session) -> Optional[int]:
        if not token:
            return None
        shop = db.query(Shop).filter(Shop.share_token == token).first()
        return shop.id if shop else None


class SqlCustomerDirectory:
    def customer_exists(self, customer_id: int, shop_id: int, db: Session) -> bool:
        found = (
            db.query(Customer.id)
            .filter(Customer.id == customer_id, Customer.shop_id == shop_id)
            .first()
        )
        return found is not None


def create_shop(db: Session, name: str, share_token: Optional[str] = None) -> Shop:
    """Register a shop with a fresh public share token."""
    shop = Shop(name=name, share_token=share_token or make_share_token())
    db.add(shop)
    db.flush()
    return shop
