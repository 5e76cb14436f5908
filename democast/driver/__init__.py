from .base import AutomationProvider, ScreencastHandler
from .chrome import ZendriverProvider

__all__ = ["AutomationProvider", "ScreencastHandler", "ZendriverProvider"]
