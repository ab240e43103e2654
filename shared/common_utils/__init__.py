from .logger import logger
from .rwlock import ReadWriteLock

__all__ = ["logger", "ReadWriteLock"]
