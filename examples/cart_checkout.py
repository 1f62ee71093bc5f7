import threading

from fanout import Subject

# A checkout service publishes cart changes; UI and audit log subscribe independently.
cart_events = Subject()


class Cart:
    def __init__(self, events: Subject):
        self._events = events
        self._items = {}
        self._lock = threading.Lock()

    def add(self, sku: str, price: float, count: int) -> None:
        with self._lock:
            self._items[sku] = (price, count)
            total = sum(p * c for p, c in self._items.values())
        self._events.notify_tagged("cart", total)
        self._events.notify_tagged("audit", sku, count)


def update_ui(total: float) -> None:
    print(f">>> Cart Total: ${total:.2f}")


def audit(sku: str, count: int) -> None:
    print(f"[audit] {sku} x{count}")


ui_subscription = cart_events.subscribe("cart", update_ui)
cart_events.subscribe("audit", audit)

cart = Cart(cart_events)
print("=" * 50)

cart.add("apple", 1.5, 4)
cart.add("pear", 2.0, 1)

ui_subscription.unsubscribe()
cart.add("plum", 0.5, 2)  # audit only

# ==================================================
# >>> Cart Total: $6.00
# [audit] apple x4
# >>> Cart Total: $8.00
# [audit] pear x1
# [audit] plum x2
