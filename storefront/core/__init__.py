# Core modules

from .config import settings, Settings, get_settings
from .storage import Storage, MemoryStorage, FileStorage

__all__ = ["settings", "Settings", "get_settings", "Storage", "MemoryStorage", "FileStorage"]
