"""Test application package."""

from .aggregates import (
    ALL_EVENTS,
    EmailChanged,
    Ledger,
    User,
    UserCreated,
    UserDeactivated,
    UserRenamed,
)
from .commands import ChangeEmail, CreateUser, DeactivateUser, RenameUser

__all__ = [
    "ALL_EVENTS",
    "User",
    "Ledger",
    "UserCreated",
    "EmailChanged",
    "UserRenamed",
    "UserDeactivated",
    "CreateUser",
    "ChangeEmail",
    "RenameUser",
    "DeactivateUser",
]
