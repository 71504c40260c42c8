# mentordesk/core/logging.py
import contextvars
import logging
import logging.config
import uuid
from typing import Any, Mapping

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

# set per request; background tasks copy it when they are created
request_id_var: contextvars.ContextVar[str | None] = contextvars.ContextVar("request_id", default=None)

# attributes every LogRecord has; anything else came in through extra=
_RESERVED = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime"}


class ContextFormatter(logging.Formatter):
    """
    Plain text line followed by the ``extra=`` fields as key=value pairs:

        2026-10-19 10:00:00,000 INFO mentordesk.services.answers answer_submitted question_id=... request_id=...
    """

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        fields = {k: v for k, v in record.__dict__.items() if k not in _RESERVED and not k.startswith("_")}
        if not fields:
            return line
        pairs = " ".join(f"{k}={v}" for k, v in fields.items() if v is not None)
        if not pairs:
            return line
        head, sep, tail = line.partition("\n")
        return f"{head} {pairs}{sep}{tail}"


class RequestIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "request_id", None) is None:
            rid = request_id_var.get()
            if rid:
                record.request_id = rid
        return True


def setup_logging(level: str = "INFO") -> None:
    """One logging setup for the API, the worker and uvicorn."""
    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "request_id": {"()": RequestIdFilter},
        },
        "formatters": {
            "context": {
                "()": ContextFormatter,
                "format": "%(asctime)s %(levelname)s %(name)s %(message)s",
            },
        },
        "handlers": {
            "default": {
                "class": "logging.StreamHandler",
                "formatter": "context",
                "filters": ["request_id"],
            },
        },
        "loggers": {
            "": {"handlers": ["default"], "level": level},
            "uvicorn": {"handlers": ["default"], "level": level, "propagate": False},
            "uvicorn.error": {"handlers": ["default"], "level": level, "propagate": False},
            "uvicorn.access": {"handlers": ["default"], "level": level, "propagate": False},
        },
    })


class RequestIdMiddleware(BaseHTTPMiddleware):
    """
    Takes X-Request-ID from the request or makes one up, echoes it on the
    response and keeps it in ``request_id_var`` for the duration of the call.
    """

    header_name = "X-Request-ID"

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get(self.header_name) or uuid.uuid4().hex
        request.state.request_id = request_id
        token = request_id_var.set(request_id)
        try:
            response: Response = await call_next(request)
        finally:
            request_id_var.reset(token)
        response.headers[self.header_name] = request_id
        return response


def log_extra(request: Request) -> Mapping[str, Any]:
    """
    For route logs:
    logger.info("answer_accepted", extra={**log_extra(request), "question_id": qid})
    """
    rid = getattr(request.state, "request_id", None)
    return {"request_id": rid} if rid else {}
