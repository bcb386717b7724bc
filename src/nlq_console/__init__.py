"""Natural-language query console package."""

from .config import HistoryConfig, ServiceConfig

__all__ = ["HistoryConfig", "ServiceConfig"]
