"""
Error Logging Service

Error logging system that:
- Writes to rotating log files when the logs directory is writable
- Stores unhandled errors in the database for querying
- Captures context (user, request, traceback)
- Sanitizes sensitive data

Usage:
    from bakebook.services.error_logging import error_logger

    try:
        # some code
    except Exception as e:
        error_logger.log_error(e, request=request, user=current_user)
"""

import logging
import traceback
import json
import sys
import uuid
from datetime import datetime, timezone
from typing import Optional, Any, Dict
from pathlib import Path
from logging.handlers import RotatingFileHandler

from bakebook.core.config import settings
from bakebook.models.error_log import ErrorLog


logger = logging.getLogger("error_logging")
logger.setLevel(logging.DEBUG)

LOG_FORMAT = '%(asctime)s | %(levelname)s | %(name)s | %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


# Sensitive fields to sanitize
SENSITIVE_FIELDS = {'password', 'password_hash', 'token', 'access_token',
                    'authorization', 'api_key', 'secret', 'credential'}


def sanitize_data(data: Any, depth: int = 0) -> Any:
    """
    Sanitize sensitive data from dictionaries and strings.
    Replaces sensitive field values with '[REDACTED]'.
    """
    if depth > 10:  # Prevent infinite recursion
        return "[MAX_DEPTH]"

    if isinstance(data, dict):
        sanitized = {}
        for key, value in data.items():
            key_lower = str(key).lower()
            if any(sensitive in key_lower for sensitive in SENSITIVE_FIELDS):
                sanitized[key] = "[REDACTED]"
            else:
                sanitized[key] = sanitize_data(value, depth + 1)
        return sanitized
    elif isinstance(data, list):
        return [sanitize_data(item, depth + 1) for item in data]
    elif isinstance(data, str):
        if len(data) > 20 and data.startswith("eyJ"):  # JWT token pattern
            return "[REDACTED_TOKEN]"
        return data
    else:
        return data


def truncate_string(s: str, max_length: int = 10000) -> str:
    """Truncate string to max length."""
    if len(s) > max_length:
        return s[:max_length] + f"... [TRUNCATED, total {len(s)} chars]"
    return s


def configure_file_logging(logs_dir: Optional[str] = None) -> bool:
    """
    Attach rotating file handlers to the root logger.

    Returns False (console only) when the directory cannot be written.
    Safe to call more than once; handlers are only added the first time.
    """
    directory = Path(logs_dir or settings.LOGS_DIR)
    try:
        directory.mkdir(parents=True, exist_ok=True)
        test_file = directory / ".write_test"
        test_file.touch()
        test_file.unlink()
    except OSError as e:
        logger.warning(f"Cannot write to logs directory {directory}: {e}. File logging disabled.")
        return False

    root_logger = logging.getLogger()
    existing = {
        getattr(handler, "baseFilename", None)
        for handler in root_logger.handlers
    }

    errors_path = str((directory / "errors.log").resolve())
    if errors_path not in existing:
        file_handler = RotatingFileHandler(
            errors_path,
            maxBytes=10 * 1024 * 1024,  # 10 MB
            backupCount=10,
            encoding='utf-8'
        )
        file_handler.setLevel(logging.ERROR)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        root_logger.addHandler(file_handler)

    detailed_path = str((directory / "app_detailed.log").resolve())
    if detailed_path not in existing:
        detailed_handler = RotatingFileHandler(
            detailed_path,
            maxBytes=10 * 1024 * 1024,  # 10 MB
            backupCount=5,
            encoding='utf-8'
        )
        detailed_handler.setLevel(logging.DEBUG)
        detailed_handler.setFormatter(logging.Formatter(
            '%(asctime)s | %(levelname)s | %(name)s | %(funcName)s:%(lineno)d | %(message)s',
            datefmt=DATE_FORMAT
        ))
        root_logger.addHandler(detailed_handler)

    return True


class ErrorLogger:
    """
    Error logging service that writes to both the log and the database.
    """

    def __init__(self):
        self.db_session_factory = None

    def set_db_session_factory(self, factory):
        """Set the database session factory for DB logging."""
        self.db_session_factory = factory

    def log_error(
        self,
        error: Exception,
        request: Optional[Any] = None,
        user: Optional[Any] = None,
        severity: str = "error",
        context: Optional[Dict] = None,
        save_to_db: bool = True
    ) -> str:
        """
        Log an error with full context.

        Args:
            error: The exception that occurred
            request: FastAPI Request object (optional)
            user: Current user object (optional)
            severity: debug, info, warning, error, critical
            context: Additional context data
            save_to_db: Whether to save to database

        Returns:
            The error_id reported back to the client
        """
        error_id = str(uuid.uuid4())
        timestamp = datetime.now(timezone.utc)

        error_type = type(error).__name__
        error_message = str(error)

        # Location info from the traceback, if there is one
        module = function = line_number = None
        exc_tb = error.__traceback__ or sys.exc_info()[2]
        if exc_tb:
            stack_trace = ''.join(traceback.format_exception(type(error), error, exc_tb))
            tb_info = traceback.extract_tb(exc_tb)
            if tb_info:
                last_frame = tb_info[-1]
                module = last_frame.filename
                function = last_frame.name
                line_number = str(last_frame.lineno)
        else:
            stack_trace = f"{error_type}: {error_message}"

        request_method = request_path = request_query = None
        client_ip = user_agent = None
        if request is not None:
            request_method = request.method
            request_path = str(request.url.path)
            request_query = str(request.url.query) if request.url.query else None
            client_ip = request.client.host if request.client else None
            user_agent = request.headers.get("user-agent")

        user_id = getattr(user, "id", None)
        username = getattr(user, "username", None)

        sanitized_context = sanitize_data(context) if context else None

        log_message = (
            f"{error_type}: {error_message} | error_id={error_id} | "
            f"user={username or 'anonymous'} | path={request_path or 'N/A'}"
        )
        if sanitized_context:
            log_message += f" | context={json.dumps(sanitized_context, default=str)}"

        if severity == "critical":
            logger.critical(log_message)
        elif severity == "error":
            logger.error(log_message)
        elif severity == "warning":
            logger.warning(log_message)
        else:
            logger.info(log_message)
        logger.debug(stack_trace)

        if save_to_db and self.db_session_factory:
            try:
                db = self.db_session_factory()
                try:
                    db.add(ErrorLog(
                        error_id=error_id,
                        timestamp=timestamp,
                        error_type=error_type,
                        error_code=str(getattr(error, 'status_code', '') or '') or None,
                        severity=severity,
                        module=module,
                        function=function,
                        line_number=line_number,
                        user_id=user_id,
                        username=username,
                        request_method=request_method,
                        request_path=request_path,
                        request_query=request_query,
                        client_ip=client_ip,
                        user_agent=truncate_string(user_agent, 500) if user_agent else None,
                        message=truncate_string(error_message or error_type, 1000),
                        stack_trace=truncate_string(stack_trace, 20000),
                        context_data=sanitized_context,
                    ))
                    db.commit()
                    logger.debug(f"Error logged to DB with ID: {error_id}")
                finally:
                    db.close()
            except Exception as db_err:
                logger.error(f"Failed to save error to database: {db_err}")

        return error_id


# Singleton instance
error_logger = ErrorLogger()


def configure_error_logging(db_session_factory, logs_dir: Optional[str] = None):
    """
    Configure the error logging system with database and file support.
    Call this during app startup.
    """
    error_logger.set_db_session_factory(db_session_factory)
    configure_file_logging(logs_dir)
    logger.info("Error logging system configured")
