"""iCal domain - External calendar import, periodic sync and public export"""

from .router import router

__all__ = ["router"]
