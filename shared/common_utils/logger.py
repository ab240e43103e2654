from os import environ
from datetime import datetime, UTC
from zoneinfo import ZoneInfo
from logging import StreamHandler, Logger, NOTSET
from colorlog import ColoredFormatter


class SingletonMeta(type):
    _instance = {}

    def __call__(cls, *args, **kwargs):
        if cls not in cls._instance:
            instance = super().__call__(*args, **kwargs)
            cls._instance[cls] = instance
        return cls._instance[cls]


class ConfigMeshLogger(Logger, metaclass=SingletonMeta):
    """Process-wide console logger.

    Level comes from LOG_LEVEL and timestamps are rendered in LOG_TIMEZONE
    (UTC by default). The thread name is part of every line so watcher
    threads can be told apart from callers.
    """

    _initialized = False

    def __init__(self):
        if ConfigMeshLogger._initialized:
            return

        super().__init__(name="ConfigMeshLogger", level=environ.get("LOG_LEVEL", NOTSET))
        timezone_name = environ.get("LOG_TIMEZONE")
        self.timezone = ZoneInfo(timezone_name) if timezone_name else UTC

        local_formatter = ColoredFormatter(
            "%(log_color)s%(asctime)s | %(levelname)s | %(threadName)s | %(msg)s",
            datefmt="%d-%m-%Y, %H:%M:%S",
            log_colors={
                "DEBUG": "blue",
                "INFO": "",
                "WARNING": "yellow",
                "ERROR": "red",
                "CRITICAL": "bold_red",
            },
        )
        local_formatter.converter = self.local_time

        console_handler = StreamHandler()
        console_handler.setFormatter(local_formatter)
        self.addHandler(console_handler)

        ConfigMeshLogger._initialized = True

    def local_time(self, *args):
        return datetime.now(tz=self.timezone).timetuple()


logger = ConfigMeshLogger()
