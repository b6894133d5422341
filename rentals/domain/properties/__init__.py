"""Properties domain - Rental units owned by an operator"""

from .router import router

__all__ = ["router"]
