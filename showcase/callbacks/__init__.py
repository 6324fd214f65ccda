"""Callback/hook system for pipeline lifecycle events."""

from showcase.callbacks.base import BaseCallback, ShowcaseCallback
from showcase.callbacks.logging import LoggingCallback

__all__ = ["BaseCallback", "LoggingCallback", "ShowcaseCallback"]
