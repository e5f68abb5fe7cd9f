from .user import (
    ALL_EVENTS,
    EmailChanged,
    Ledger,
    User,
    UserCreated,
    UserDeactivated,
    UserRenamed,
)

__all__ = [
    "ALL_EVENTS",
    "User",
    "Ledger",
    "UserCreated",
    "EmailChanged",
    "UserRenamed",
    "UserDeactivated",
]
