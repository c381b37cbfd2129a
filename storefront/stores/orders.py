"""
Order store: checkout, the customer's own orders, the admin order list and
admin status changes. Status transitions are decided by the backend; the
store only mirrors the order the backend returns.
"""

import logging
from typing import Any, List, Optional, Union

from storefront.notices import Notifier
from storefront.schemas import CheckoutForm, Order, OrderCreate, OrderStatus
from storefront.stores.base import Store

logger = logging.getLogger(__name__)

ORDER_FAILED = "Failed to create order"


class OrderStore(Store):
    name = "orders"

    def __init__(self, api, cart, session=None, notifier: Optional[Notifier] = None):
        super().__init__(api)
        self.cart = cart
        self.session = session
        self.notifier = notifier or cart.notifier
        self.orders: List[Order] = []
        self.user_orders: List[Order] = []
        self.current_order: Optional[Order] = None
        self.update_success = False

    def create_order(self, order_data: Any) -> Optional[Order]:
        payload = self._validate(OrderCreate, order_data)
        if payload is None:
            return None

        def apply(response):
            self.current_order = Order.model_validate(response)
            self.cart.clear_cart()
            return self.current_order

        return self._run(
            "create",
            lambda: self.api.post("/orders", payload.to_wire(), fallback=ORDER_FAILED),
            apply,
        )

    def checkout(self, form: Any) -> Optional[Order]:
        """Turn the cart into an order, enforcing the checkout rules first."""
        if not self.cart.items:
            self.notifier.info("Your cart is empty")
            return None
        if self.session is not None and not self.session.is_authenticated:
            self.notifier.info("Please log in to continue")
            return None
        form = self._validate(CheckoutForm, form)
        if form is None:
            return None

        order_data = {
            "order_items": [
                {"product_id": item.id, "quantity": item.quantity, "price": item.price}
                for item in self.cart.items
            ],
            "shipping_address": form.shipping_address,
            "payment_method": form.payment_method,
            "notes": form.notes,
            "total_price": self.cart.total_amount,
        }
        order = self.create_order(order_data)
        if order is None:
            message = self.error if isinstance(self.error, str) else ORDER_FAILED
            self.notifier.error(message)
        else:
            self.notifier.success("Order created successfully")
        return order

    def fetch_user_orders(self) -> Optional[List[Order]]:
        def apply(payload):
            self.user_orders = [Order.model_validate(o) for o in payload or []]
            return self.user_orders

        return self._run(
            "user_orders",
            lambda: self.api.get("/orders/my-orders", fallback="Failed to fetch orders"),
            apply,
        )

    def fetch_orders(self) -> Optional[List[Order]]:
        def apply(payload):
            self.orders = [Order.model_validate(o) for o in payload or []]
            return self.orders

        return self._run(
            "orders",
            lambda: self.api.get("/orders/admin", fallback="Failed to fetch orders"),
            apply,
        )

    def fetch_order_by_id(self, order_id: int) -> Optional[Order]:
        def apply(payload):
            self.current_order = Order.model_validate(payload)
            return self.current_order

        return self._run(
            "current",
            lambda: self.api.get(f"/orders/{order_id}", fallback="Failed to fetch order"),
            apply,
        )

    def update_order_status(self, order_id: int, status: Union[str, OrderStatus]) -> Optional[Order]:
        status = OrderStatus(status)

        def pending():
            self.update_success = False

        def apply(payload):
            order = Order.model_validate(payload)
            self.orders = [order if o.id == order.id else o for o in self.orders]
            self.user_orders = [order if o.id == order.id else o for o in self.user_orders]
            if self.current_order is not None and self.current_order.id == order.id:
                self.current_order = order
            self.update_success = True
            return order

        return self._run(
            f"status:{order_id}",
            lambda: self.api.put(f"/orders/{order_id}/status", {"status": status.value},
                                 fallback="Failed to update order status"),
            apply,
            on_pending=pending,
        )

    def cancel_order(self, order_id: int) -> Optional[Order]:
        return self.update_order_status(order_id, OrderStatus.CANCELLED)

    def clear_current_order(self) -> None:
        self.current_order = None
