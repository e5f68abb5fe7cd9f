"""Aggregate repository infrastructure."""

from .repository import AggregateFactory, Repository

__all__ = [
    "AggregateFactory",
    "Repository",
]
