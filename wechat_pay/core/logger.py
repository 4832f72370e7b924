import logging
import os
import sys
import uuid
from contextvars import ContextVar
from typing import TYPE_CHECKING, Optional

from loguru import logger

from wechat_pay.core.config import Environment, settings

if TYPE_CHECKING:
    from loguru import Record

# ============================================
# CONTEXT VARIABLES FOR REQUEST TRACKING
# ============================================
request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)


# ============================================
# LOG FILE
# ============================================
LOG_FILE_NAME = "wechat_pay.log"


# ============================================
# LOG LEVEL MAPPING
# ============================================

LOG_LEVELs = {
    50: "CRITICAL",
    40: "ERROR",
    30: "WARNING",
    20: "INFO",
    10: "DEBUG",
    0: "NOTSET",
}


# ============================================
# CUSTOM FILTER FOR CORRELATION AND PROCESS ID
# ============================================


def correlation_filter(record: "Record") -> bool:
    """
    Add correlation ID and process ID to log records.
    The correlation ID is the nonce of the WeChat Pay request
    being sent, so every line of one round-trip shares it.

    Args:
        record (Record): Log record from Loguru.

    Returns:
        bool: Always True, nothing is filtered out.
    """
    record["extra"]["request_id"] = request_id_var.get() or str(uuid.uuid4())[:8]
    record["extra"]["process_id"] = os.getpid()

    return True


# ============================================
# INTERCEPT HANDLER FOR STANDARD LOGGING
# ============================================


class InterceptHandler(logging.Handler):
    """
    Intercepts standard logging and redirects to Loguru.
    Used to route httpx and httpcore loggers through our Loguru configuration.
    """

    def emit(self, record: logging.LogRecord):
        """
        Process a log record and redirect it to Loguru.
        """
        # Get corresponding Loguru level if it exists
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Find the caller from where the logging call originated
        frame = logging.currentframe()
        depth = 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


# ============================================
# MAIN LOGGER SETUP FUNCTION
# ============================================


def setup_logger():
    """
    Configure Loguru logger for applications using the WeChat Pay client.

    Features:
    - Thread and process safe with enqueue=True
    - Request correlation through the request nonce
    - 3 months retention, 10MB rotation
    - Compression for old logs (gzip)
    - Different outputs for console vs file

    Call this once during application startup. The library itself only
    emits through loguru and never configures sinks on import.
    """
    # Remove default handler to avoid duplicate logs
    logger.remove()

    log_level = LOG_LEVELs[settings.log_level]

    # ============================================
    # CONSOLE OUTPUT: Simplified, colored format
    # ============================================
    console_format = (
        "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
        "<level>{level: <8}</level> | "
        "<magenta>PID:{extra[process_id]}</magenta> | "
        "<yellow>ReqID:{extra[request_id]}</yellow> | "
        "<cyan>{name}:{function}:{line}</cyan> | "
        "<level>{message}</level>"
    )

    logger.add(
        sys.stdout,
        format=console_format,
        level=logging.DEBUG if settings.current_environment == Environment.DEV else logging.INFO,
        colorize=True,
        enqueue=True,
        filter=correlation_filter,
    )

    # ============================================
    # FILE OUTPUT: Detailed format with full context
    # ============================================
    file_format = (
        "{time:YYYY-MM-DD HH:mm:ss!UTC} | "
        "{level: <8} | "
        "PID:{extra[process_id]} | "
        "ReqID:{extra[request_id]} | "
        "{name}:{function}:{line} | "
        "{message}"
    )

    settings.log_dir.mkdir(parents=True, exist_ok=True)

    logger.add(
        settings.log_dir / LOG_FILE_NAME,
        format=file_format,
        level=log_level,
        rotation="10 MB",
        retention="3 months",
        compression="gz",
        enqueue=True,
        serialize=False,
        filter=correlation_filter,
        backtrace=True,
        # Locals would expose secret keys and card numbers
        diagnose=False,
    )

    logger.info(
        f"Logger initialized | "
        f"Environment: {settings.current_environment.value} | "
        f"Level: {log_level}"
    )


def configure_http_logging():
    """
    Replace the standard logging handlers of httpx and httpcore with Loguru.

    Call this after setup_logger().
    """
    for name in ("httpx", "httpcore"):
        std_logger = logging.getLogger(name)
        std_logger.handlers = [InterceptHandler()]
        std_logger.propagate = False

    logger.debug("httpx logging configured to use Loguru")


# ============================================
# SHUTDOWN HANDLER
# ============================================


def shutdown_logger():
    """
    Gracefully shutdown logger and flush all pending logs.
    """
    logger.info("Shutting down logger...")

    # Let Loguru finish processing queued logs
    logger.complete()

    logger.info("Logger shutdown complete")
