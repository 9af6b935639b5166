"""Route modules exposed by the API package."""

from . import ping, queue

__all__ = ["ping", "queue"]
