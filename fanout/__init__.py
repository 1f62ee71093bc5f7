"""
Fanout - Thread-Safe Tagged Publish/Subscribe

An in-process subject that fans events of arbitrary argument shapes out to the
subscribers registered for them, optionally scoped by a tag.
"""

__version__ = "0.1.0"

from .handle import AutoUnsubscribe, Subscription
from .subject import Subject, SubjectState
from .util.signature import IncompatibleCallbackError

__all__ = [
    # Subject
    "Subject",
    "SubjectState",
    # Handles
    "Subscription",
    "AutoUnsubscribe",
    # Exceptions
    "IncompatibleCallbackError",
]
