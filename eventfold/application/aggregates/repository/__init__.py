"""Repository infrastructure for aggregate persistence."""

from .repository import AggregateFactory, Repository

__all__ = [
    "AggregateFactory",
    "Repository",
]
