"""Route modules exposed by the API package."""

from . import companies, exports, ping, sessions, tickets

__all__ = ["companies", "exports", "ping", "sessions", "tickets"]
