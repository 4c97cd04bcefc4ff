"""
Cart aggregate.

The cart is owned by the shopper's browser; the server only ever sees it as
the item list submitted at checkout. There is no cart table. Unit prices are
the prices shown when the item was added, not re-read from the catalog.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterable, Optional

from ...exceptions import EmptyCartError
from ...shared.money import to_decimal


@dataclass(frozen=True)
class CartLine:
    product_id: str
    name: str
    unit_price: Decimal
    quantity: int

    def __post_init__(self):
        if self.quantity < 1:
            raise ValueError("quantity must be at least 1")
        object.__setattr__(self, "unit_price", to_decimal(self.unit_price))

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity


@dataclass
class Cart:
    lines: list[CartLine] = field(default_factory=list)

    @classmethod
    def from_items(cls, items: Iterable) -> "Cart":
        """Build from checkout request items (objects with id, name, price, quantity)"""
        cart = cls()
        for item in items:
            cart.add(item.id, item.name, item.price, item.quantity)
        return cart

    def add(
        self,
        product_id: str,
        name: str,
        unit_price,
        quantity: int = 1,
        available_stock: Optional[int] = None,
    ) -> CartLine:
        """
        Add a product, merging with an existing line for the same product.

        `available_stock` is the stock count the shopper saw; the merged
        quantity is capped at it. Nothing re-checks it at payment time.
        """
        existing = self.get(product_id)
        new_quantity = quantity + (existing.quantity if existing else 0)
        if available_stock is not None:
            new_quantity = min(new_quantity, available_stock)
        if new_quantity < 1:
            raise ValueError(f"{name} is out of stock")

        # Keep the price captured when the product first went into the cart
        price = existing.unit_price if existing else unit_price
        line = CartLine(product_id=product_id, name=name, unit_price=price, quantity=new_quantity)
        self._replace(product_id, line)
        return line

    def update_quantity(self, product_id: str, quantity: int) -> None:
        """Set a line's quantity; zero or less removes it"""
        existing = self.get(product_id)
        if existing is None:
            return
        if quantity <= 0:
            self.remove(product_id)
            return
        self._replace(
            product_id,
            CartLine(existing.product_id, existing.name, existing.unit_price, quantity),
        )

    def remove(self, product_id: str) -> None:
        self.lines = [line for line in self.lines if line.product_id != product_id]

    def clear(self) -> None:
        self.lines = []

    def get(self, product_id: str) -> Optional[CartLine]:
        return next((line for line in self.lines if line.product_id == product_id), None)

    def ensure_not_empty(self) -> None:
        if self.is_empty:
            raise EmptyCartError()

    @property
    def is_empty(self) -> bool:
        return not self.lines

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self.lines)

    @property
    def subtotal(self) -> Decimal:
        return sum((line.line_total for line in self.lines), Decimal("0.00"))

    def _replace(self, product_id: str, line: CartLine) -> None:
        for index, current in enumerate(self.lines):
            if current.product_id == product_id:
                self.lines[index] = line
                return
        self.lines.append(line)
