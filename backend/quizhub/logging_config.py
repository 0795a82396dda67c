import functools
import logging
import logging.handlers
import os
import sys
import time
import uuid
from pathlib import Path

import structlog

from .config import settings
from .version import APP_VERSION

# Third-party loggers that are too chatty at INFO
QUIET_LOGGERS = ("httpx", "uvicorn.access", "sqlalchemy.engine", "aiosqlite", "asyncpg")


class LoggingConfig:
    """Centralized logging configuration"""

    def __init__(self):
        self.log_level = os.getenv("LOG_LEVEL", "INFO").upper()
        self.log_format = os.getenv("LOG_FORMAT", "json")  # json or text
        self.log_file_enabled = os.getenv("LOG_FILE_ENABLED", "false").lower() == "true"
        self.log_file_path = os.getenv("LOG_FILE_PATH", "logs/quizhub.log")
        self.log_file_max_size = int(os.getenv("LOG_FILE_MAX_SIZE", "10485760"))  # 10MB
        self.log_file_backup_count = int(os.getenv("LOG_FILE_BACKUP_COUNT", "5"))

    @property
    def level(self) -> int:
        return getattr(logging, self.log_level, logging.INFO)

    def setup_logging(self):
        """Route structlog events through stdlib handlers"""
        root_logger = logging.getLogger()
        root_logger.handlers.clear()
        root_logger.setLevel(self.level)

        if self.log_format == "json":
            final_processor = structlog.stdlib.render_to_log_kwargs
        else:
            final_processor = structlog.dev.ConsoleRenderer()

        structlog.configure(
            processors=[
                structlog.contextvars.merge_contextvars,
                structlog.stdlib.filter_by_level,
                structlog.stdlib.add_logger_name,
                structlog.stdlib.add_log_level,
                structlog.processors.TimeStamper(fmt="iso", utc=True),
                structlog.processors.format_exc_info,
                _add_service_context,
                final_processor,
            ],
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=True,
        )

        formatter = self._build_formatter()
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

        if self.log_file_enabled:
            self._add_file_handler(root_logger, formatter)

        for name in QUIET_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

        get_logger("quizhub.logging").info(
            "Logging configured",
            log_level=self.log_level,
            log_format=self.log_format,
            file_logging=self.log_file_enabled,
        )

    def _build_formatter(self) -> logging.Formatter:
        if self.log_format == "json":
            from pythonjsonlogger import jsonlogger
            return jsonlogger.JsonFormatter("%(asctime)s %(name)s %(levelname)s %(message)s")
        return logging.Formatter("%(message)s")

    def _add_file_handler(self, root_logger: logging.Logger, formatter: logging.Formatter):
        logger = get_logger("quizhub.logging")
        try:
            Path(self.log_file_path).parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.handlers.RotatingFileHandler(
                self.log_file_path,
                maxBytes=self.log_file_max_size,
                backupCount=self.log_file_backup_count,
                encoding="utf-8",
            )
        except OSError as e:
            logger.error("File logging disabled", error=str(e), log_path=self.log_file_path)
            return

        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)


def _add_service_context(logger, method_name, event_dict):
    event_dict.setdefault("service", settings.app_name)
    event_dict.setdefault("version", APP_VERSION)
    event_dict.setdefault("environment", settings.environment)
    return event_dict


logging_config = LoggingConfig()


def setup_logging():
    logging_config.setup_logging()


def get_logger(name: str):
    return structlog.get_logger(name)


class LoggingMiddleware:
    """
    ASGI middleware that logs each HTTP request once it finishes.

    A short request id is bound to the structlog context so every event
    logged while serving the request carries it.
    """

    def __init__(self, app):
        self.app = app
        self.logger = get_logger("quizhub.middleware")

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        started = time.perf_counter()
        structlog.contextvars.bind_contextvars(request_id=uuid.uuid4().hex[:12])
        status_code = None

        async def send_wrapper(message):
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message["status"]
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        except Exception as e:
            self.logger.error(
                "Request failed",
                method=scope["method"],
                path=scope["path"],
                error_type=type(e).__name__,
                duration_ms=round((time.perf_counter() - started) * 1000, 1),
            )
            raise
        else:
            self.logger.info(
                "Request completed",
                method=scope["method"],
                path=scope["path"],
                status_code=status_code,
                duration_ms=round((time.perf_counter() - started) * 1000, 1),
            )
        finally:
            structlog.contextvars.unbind_contextvars("request_id")


def log_function_call(func_name: str):
    """Log entry and outcome of an async service function"""
    def decorator(func):
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            logger = get_logger("quizhub.functions")
            logger.debug(f"Calling {func_name}")
            try:
                result = await func(*args, **kwargs)
            except Exception as e:
                logger.warning(f"{func_name} failed", error=str(e), error_type=type(e).__name__)
                raise
            logger.debug(f"Completed {func_name}")
            return result
        return wrapper
    return decorator
