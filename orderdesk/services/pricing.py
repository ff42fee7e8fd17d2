from typing import Iterable, Protocol


class PricedLine(Protocol):
    price: int
    qty: int


def calculate_total(items: Iterable[PricedLine]) -> int:
    """Sum of ``price * qty`` over the lines; no lines means 0."""
    return sum(int(item.price) * int(item.qty) for item in items)
