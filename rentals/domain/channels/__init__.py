"""Channels domain - Sales channels and their default commission"""

from .router import router

__all__ = ["router"]
