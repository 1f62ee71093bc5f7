from fanout import AutoUnsubscribe, IncompatibleCallbackError, Subject

# ------------------------------------------------------------------------------------------------

print()
print("=" * 100)
print("Subscribing and notifying")
print("-" * 100)
print()

# A subject fans events out to every subscriber whose parameter types match.
events = Subject()


def log_total(total: int) -> None:
    print(f"Total is now: {total}")


def log_named(name: str, total: int) -> None:
    print(f"{name} has {total}")


handle = events.subscribe(log_total)
events.subscribe(log_named)

events.notify(5)  # Total is now: 5
events.notify("Alice", 3)  # Alice has 3
events.notify(5.0)  # Nothing: no subscriber takes a float

handle.unsubscribe()
events.notify(6)  # Nothing: log_total is gone

# ------------------------------------------------------------------------------------------------

print()
print("=" * 100)
print("Tags")
print("-" * 100)
print()

# Tags split one subject into independent channels.
events.subscribe("orders", lambda order_id: print(f"Order {order_id}"), signature=(int,))
events.subscribe("refunds", lambda order_id: print(f"Refund {order_id}"), signature=(int,))

events.notify_tagged("orders", 42)  # Order 42
events.notify(7, tag="refunds")  # Refund 7

# ------------------------------------------------------------------------------------------------

print()
print("=" * 100)
print("Scoped subscriptions")
print("-" * 100)
print()

# AutoUnsubscribe removes the subscriber when the with-block exits.
with AutoUnsubscribe(events.subscribe("orders", log_total)):
    events.notify_tagged("orders", 1)  # Order 1 / Total is now: 1
events.notify_tagged("orders", 2)  # Order 2

# ------------------------------------------------------------------------------------------------

print()
print("=" * 100)
print("Rejected callbacks")
print("-" * 100)
print()


def returns_something(x: int) -> int:
    return x


try:
    events.subscribe(returns_something)
except IncompatibleCallbackError as e:
    print(f"Rejected: {e}")
