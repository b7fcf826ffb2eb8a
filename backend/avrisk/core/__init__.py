from avrisk.core.config import Settings, get_settings, settings
from avrisk.core.logging import SyncLogger, get_logger

__all__ = ["Settings", "SyncLogger", "get_logger", "get_settings", "settings"]
