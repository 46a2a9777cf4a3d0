"""Route modules for the Users API."""
from . import users

__all__ = ["users"]
