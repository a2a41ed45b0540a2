"""Dispatcher adapter layer - hands generation jobs to an external push queue."""

from app.adapters.dispatcher.base import AbstractDispatcher
from app.adapters.dispatcher.factory import create_dispatcher
from app.adapters.dispatcher.qstash import QStashDispatcher

__all__ = [
    "AbstractDispatcher",
    "QStashDispatcher",
    "create_dispatcher",
]
