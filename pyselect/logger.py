"""
Logger Module with OOP Interface

Centralized logging for pyselect.  Every module obtains its logger through
``get_module_logger(__name__)`` so handlers are configured exactly once.

Usage:
    from pyselect.logger import get_module_logger
    logger = get_module_logger(__name__)
    logger.info("Information message")

Enabling file output (e.g. from the CLI after loading config):
    from pyselect.logger import Logger
    Logger.init_logging(log_dir='C:/Users/me/AppData/Local/pyselect/log',
                        level='INFO')
"""

import logging
import sys
from typing import Dict, Optional, Union
from pathlib import Path

_FORMAT = '[%(levelname)s %(asctime)s] [%(name)s] %(message)s'
_ROOT_NAME = 'pyselect'


class Logger:
    """
    Object-oriented logger wrapper with centralized configuration.

    This class provides:
    - Centralized logging configuration under the ``pyselect`` logger
    - Module-specific logger instances
    - Optional file output (``log.txt`` for INFO, ``log.err`` for ERROR)

    Example:
        >>> Logger.init_logging()
        >>> logger = Logger.get_logger(__name__)
        >>> logger.info("Information message")
    """

    _initialized = False
    _loggers: Dict[str, logging.Logger] = {}

    @classmethod
    def get_logger(cls, name: str = _ROOT_NAME) -> logging.Logger:
        """
        Get or create a logger instance for the specified name.

        Args:
            name: Logger name (typically __name__ for module-specific logging)

        Returns:
            logging.Logger: Configured logger instance
        """
        if not cls._initialized:
            cls.init_logging()

        if name not in cls._loggers:
            cls._loggers[name] = logging.getLogger(name)

        return cls._loggers[name]

    @classmethod
    def init_logging(
        cls,
        log_dir: Optional[Union[str, Path]] = None,
        level: Union[int, str] = logging.WARNING,
    ) -> None:
        """
        Initialize logging configuration (idempotent - safe to call multiple times).

        Sets up:
        - Console handler on stderr at *level*
        - File handlers for INFO and ERROR levels when *log_dir* is given
        - Common formatter with timestamp

        When called again with a different *log_dir*, file handlers pointing
        at the old directory are replaced.

        Args:
            log_dir: Directory for ``log.txt`` / ``log.err``.  None = console only.
            level:   Console level, as a ``logging`` constant or level name.
        """
        if isinstance(level, str):
            level = logging.getLevelName(level.upper())
            if not isinstance(level, int):
                level = logging.WARNING

        formatter = logging.Formatter(_FORMAT)
        package_logger = logging.getLogger(_ROOT_NAME)

        log_dir_abs = None
        if log_dir:
            log_dir_abs = Path(log_dir).resolve()

        # Drop file handlers that write to another directory
        for handler in package_logger.handlers[:]:
            if isinstance(handler, logging.FileHandler):
                handler_dir = Path(handler.baseFilename).resolve().parent
                if handler_dir != log_dir_abs:
                    handler.close()
                    package_logger.removeHandler(handler)

        if log_dir_abs is not None:
            log_dir_abs.mkdir(parents=True, exist_ok=True)
            existing = {
                Path(h.baseFilename).name
                for h in package_logger.handlers
                if isinstance(h, logging.FileHandler)
            }
            if 'log.txt' not in existing:
                file_handler = logging.FileHandler(
                    str(log_dir_abs / 'log.txt'), mode='a', encoding='utf-8'
                )
                file_handler.setLevel(logging.INFO)
                file_handler.setFormatter(formatter)
                package_logger.addHandler(file_handler)
            if 'log.err' not in existing:
                err_handler = logging.FileHandler(
                    str(log_dir_abs / 'log.err'), mode='a', encoding='utf-8'
                )
                err_handler.setLevel(logging.ERROR)
                err_handler.setFormatter(formatter)
                package_logger.addHandler(err_handler)

        console_handlers = [
            h for h in package_logger.handlers
            if isinstance(h, logging.StreamHandler)
            and not isinstance(h, logging.FileHandler)
        ]
        if console_handlers:
            for handler in console_handlers:
                handler.setLevel(level)
        else:
            console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setLevel(level)
            console_handler.setFormatter(formatter)
            package_logger.addHandler(console_handler)

        package_logger.setLevel(logging.DEBUG)
        package_logger.propagate = True
        cls._initialized = True


def get_module_logger(module_name: str = _ROOT_NAME) -> logging.Logger:
    """
    Get a logger instance for the specified module.

    Args:
        module_name: Module name (use __name__ for automatic module detection)

    Returns:
        logging.Logger: Configured logger instance

    Example:
        >>> from pyselect.logger import get_module_logger
        >>> logger = get_module_logger(__name__)
        >>> logger.debug("Skipping vendor PyLauncher")
    """
    return Logger.get_logger(module_name)
