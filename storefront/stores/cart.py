"""
Cart store. Entirely client-side: nothing here talks to the backend.

Every line keeps 1 <= quantity <= stock_quantity. Requests outside that range
are clamped, never rejected, and a warning notice is raised when stock is the
reason a quantity came out lower than asked.
"""

import logging
from typing import Any, Iterator, List, Optional

from storefront.notices import Notifier
from storefront.schemas import CartItem, Product

logger = logging.getLogger(__name__)


class CartStore:
    name = "cart"

    def __init__(self, notifier: Optional[Notifier] = None):
        self.notifier = notifier or Notifier()
        self.items: List[CartItem] = []
        self.total_quantity = 0
        self.total_amount = 0.0

    def __iter__(self) -> Iterator[CartItem]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def find(self, product_id: int) -> Optional[CartItem]:
        for item in self.items:
            if item.id == product_id:
                return item
        return None

    def _recalculate(self):
        self.total_quantity = sum(item.quantity for item in self.items)
        self.total_amount = round(sum(item.price * item.quantity for item in self.items), 2)

    def _clamp(self, item: CartItem, requested: int) -> int:
        if requested > item.stock_quantity:
            self.notifier.warning(f"Maximum quantity available: {item.stock_quantity}")
            return item.stock_quantity
        return max(1, requested)

    def add_to_cart(self, item: Any, quantity: Optional[int] = None) -> Optional[CartItem]:
        """
        Add a product (a CartItem, a Product or a plain dict). Adding a product
        already in the cart increases that line instead of duplicating it.
        """
        if isinstance(item, Product):
            item = CartItem.from_product(item)
        elif not isinstance(item, CartItem):
            item = CartItem.model_validate(item)
        if quantity is not None:
            item = item.model_copy(update={"quantity": quantity})

        if item.stock_quantity < 1:
            self.notifier.error(f"{item.name} is out of stock")
            return None

        existing = self.find(item.id)
        if existing is None:
            line = item.model_copy()
            line.quantity = self._clamp(line, item.quantity)
            self.items.append(line)
        else:
            existing.stock_quantity = item.stock_quantity
            existing.price = item.price
            existing.quantity = self._clamp(existing, existing.quantity + item.quantity)
            line = existing

        self._recalculate()
        self.notifier.success(f"{line.name} added to cart")
        return line

    def remove_from_cart(self, product_id: int) -> None:
        self.items = [item for item in self.items if item.id != product_id]
        self._recalculate()

    def update_quantity(self, product_id: int, quantity: int) -> Optional[CartItem]:
        item = self.find(product_id)
        if item is None:
            logger.debug("update_quantity: product %s is not in the cart", product_id)
            return None
        item.quantity = self._clamp(item, quantity)
        self._recalculate()
        return item

    def clear_cart(self) -> None:
        self.items = []
        self._recalculate()
