import logging
import os
from collections import deque
from datetime import datetime
from reportportal_client import RPLogHandler


class Logger:
    """
    Process-wide logger for the reseller client

    Class methods log through one shared "ResellerAPI" logger. Messages at
    ERROR and above are also collected, up to MAX_ERROR_LOGS of the most
    recent, so a caller (or a test run) can print a summary of what went wrong.
    """
    _instance = None
    _initialized = False
    _rp_handler = None
    # Oldest collected errors are dropped past this many
    MAX_ERROR_LOGS = 200
    _error_logs = deque(maxlen=MAX_ERROR_LOGS)

    LOGGER_NAME = "ResellerAPI"

    DEFAULT_FILE_LEVEL = "DEBUG"
    DEFAULT_CONSOLE_LEVEL = "INFO"

    # Plan reads run on worker threads, so the thread name is part of each line
    LOG_FORMAT = '%(asctime)s - %(levelname)s - [%(threadName)s] %(message)s'

    def __new__(cls, *args, **kwargs):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self, log_path=None, file_level=None, console_level=None):
        if Logger._initialized:
            return

        Logger._error_logs = deque(maxlen=self.MAX_ERROR_LOGS)
        self.log_dir = log_path or os.getenv('RESELLER_LOG_PATH')
        self.log_file = None

        self.logger = logging.getLogger(self.LOGGER_NAME)
        self.logger.propagate = False
        self.logger.setLevel(logging.DEBUG)
        self.logger.handlers.clear()

        formatter = logging.Formatter(self.LOG_FORMAT, datefmt='%Y-%m-%d %H:%M:%S')

        console_handler = logging.StreamHandler()
        console_handler.setLevel(self._level(
            console_level or os.getenv('RESELLER_LOG_LEVEL'), self.DEFAULT_CONSOLE_LEVEL
        ))
        console_handler.setFormatter(formatter)
        self.logger.addHandler(console_handler)

        if self.log_dir:
            os.makedirs(self.log_dir, exist_ok=True)
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            self.log_file = os.path.join(self.log_dir, f'reseller_api_{timestamp}.log')

            file_handler = logging.FileHandler(self.log_file)
            file_handler.setLevel(self._level(file_level, self.DEFAULT_FILE_LEVEL))
            file_handler.setFormatter(formatter)
            self.logger.addHandler(file_handler)

        # ReportPortal only receives records while a launch is active
        try:
            Logger._rp_handler = RPLogHandler(level=logging.DEBUG)
            self.logger.addHandler(Logger._rp_handler)
        except Exception as e:
            Logger._rp_handler = None
            self.logger.warning(f"ReportPortal handler unavailable: {str(e)}")

        Logger._initialized = True

    @staticmethod
    def _level(name, default):
        """Resolve a level name such as 'info', falling back to default"""
        level = logging.getLevelName((name or default).upper())
        if isinstance(level, int):
            return level
        return logging.getLevelName(default)

    @classmethod
    def get_instance(cls, log_path=None, file_level=None, console_level=None):
        if cls._instance is None:
            cls._instance = Logger(log_path, file_level, console_level)
        return cls._instance

    @classmethod
    def _log(cls, level, message):
        cls.get_instance().logger.log(level, message)

    @classmethod
    def debug(cls, message):
        cls._log(logging.DEBUG, message)

    @classmethod
    def info(cls, message):
        cls._log(logging.INFO, message)

    @classmethod
    def warning(cls, message):
        """Log a warning; billing changes are always logged at this level"""
        cls._log(logging.WARNING, message)

    @classmethod
    def error(cls, message):
        """Log an error and keep it for get_error_summary()"""
        cls._error_logs.append(message)
        cls._log(logging.ERROR, message)

    @classmethod
    def critical(cls, message):
        cls._error_logs.append(message)
        cls._log(logging.CRITICAL, message)

    @classmethod
    def init_error_collection(cls):
        """Forget previously collected errors"""
        cls._error_logs = deque(maxlen=cls.MAX_ERROR_LOGS)

    @classmethod
    def get_error_summary(cls):
        """
        Collected error messages as one block of text

        Returns:
            str: One message per line between summary markers
        """
        if not cls._error_logs:
            return "No errors collected"

        lines = ["\n===== ERROR SUMMARY ====="]
        lines.extend(cls._error_logs)
        lines.append("===== END ERROR SUMMARY =====")
        return "\n".join(lines)

    @staticmethod
    def redact(secret, visible=6):
        """Short, non-reversible preview of a cookie or token for log lines"""
        if not secret:
            return "<none>"
        return f"{secret[:visible]}..."
