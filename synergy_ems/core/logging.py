import logging
from datetime import datetime, timezone
from typing import Any, Dict
from pythonjsonlogger import jsonlogger
from contextvars import ContextVar

# Context variable to store request_id for the current task/request
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

# Keys passed through `extra=` by services, auth and middleware. They are
# nested under "context" so every line has the same top-level shape.
CONTEXT_FIELDS = (
    "employee_id",
    "leave_request_id",
    "leave_type_id",
    "year",
    "auth_code",
    "auth_message",
    "error_code",
    "path",
    "duration_ms",
)


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super(CustomJsonFormatter, self).add_fields(log_record, record, message_dict)

        log_record["timestamp"] = log_record.get("timestamp") or datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["request_id"] = request_id_var.get() or None
        log_record["context"] = {key: log_record.pop(key) for key in CONTEXT_FIELDS if key in log_record}


def setup_logging(level: int = logging.INFO):
    logger = logging.getLogger()
    # Importing the app twice (tests, reloads) must not stack handlers
    for handler in logger.handlers:
        if isinstance(handler.formatter, CustomJsonFormatter):
            return
    log_handler = logging.StreamHandler()
    log_handler.setFormatter(CustomJsonFormatter("%(timestamp) %(level) %(name) %(message)"))
    logger.addHandler(log_handler)
    logger.setLevel(level)

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
