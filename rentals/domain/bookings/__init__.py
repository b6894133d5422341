"""Bookings domain - Stays entered by hand or imported from calendar feeds"""

from .router import router

__all__ = ["router"]
