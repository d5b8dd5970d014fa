"""PlaySell login portal - credential resolution, first-access detection and role routing."""

from .config import get_config_manager
from .core import LoginPortal

__version__ = "1.0.0"

__all__ = ["LoginPortal", "get_config_manager"]
