"""
Screen service handlers
"""

from handlers.base import BaseHandler
from handlers.screen import ScreenHandler

__all__ = [
    'BaseHandler',
    'ScreenHandler',
]
