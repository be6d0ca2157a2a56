"""
SocialForge Backend — Logging & AI Observability
=================================================

What:  Logging configuration, the request correlation ContextVar, and the
       observer hooks the resilient invoker reports through.
How:   Stdlib logging with a consistent line format. AI events are emitted as
       log records whose ``extra`` carries an ``event`` name plus fields, so a
       JSON formatter or log shipper can index them.
Who:   setup_logging() is called once by the process entry point;
       LoggingObserver is the default observer of every ResilientInvoker.

Event Shapes (logger "socialforge.ai"):
    ai_request  INFO     service, user_id, request_id, prompt_length
    ai_retry    WARNING  service, user_id, request_id, attempt, elapsed_ms, next_delay_ms, kind
    ai_success  INFO     service, user_id, request_id, duration_ms, attempts
    ai_error    ERROR    service, user_id, request_id, error, kind, attempts

What we log vs what we DON'T log (privacy):
    ✅ Log: service label, correlation ids, prompt length, timings, error kind
    ❌ Don't log: prompt text, generated content
"""

import logging
import sys
from contextvars import ContextVar
from dataclasses import dataclass
from typing import Optional

from socialforge.exceptions import AIServiceError

# Coroutine-local correlation id; set by whatever layer receives the request
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


def setup_logging(level: str = "INFO") -> None:
    """
    Configure logging for the entire process.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s

    Production upgrade:
        Replace StreamHandler with python-json-logger to ship the ``extra``
        fields as JSON.
    """
    log_format = (
        "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    )

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=log_format,
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stdout),
        ],
        force=True,
    )

    # Reduce noise from third-party libraries
    logging.getLogger("google").setLevel(logging.WARNING)
    logging.getLogger("grpc").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)


@dataclass(frozen=True)
class AttemptRecord:
    """One failed attempt that is about to be retried."""

    attempt: int
    elapsed: float
    error: AIServiceError
    next_delay: float


class InvocationObserver:
    """
    Side channel for invocation lifecycle events.

    Every hook is a no-op here; subclasses override what they need. Hooks
    return nothing and must not be relied on for control flow: the invoker
    suppresses (and logs) any exception a hook raises.
    """

    def on_request(self, service: str, *, user_id: Optional[int], request_id: str,
                   prompt: Optional[str]) -> None:
        pass

    def on_retry(self, service: str, record: AttemptRecord, *, user_id: Optional[int],
                 request_id: str) -> None:
        pass

    def on_success(self, service: str, duration: float, attempts: int, *,
                   user_id: Optional[int], request_id: str) -> None:
        pass

    def on_error(self, service: str, error: AIServiceError, attempts: int, *,
                 user_id: Optional[int], request_id: str) -> None:
        pass


class LoggingObserver(InvocationObserver):
    """Writes the four AI events to a logger (default "socialforge.ai")."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger("socialforge.ai")

    def on_request(self, service, *, user_id, request_id, prompt):
        self.logger.info(
            "[%s] AI service request: %s",
            request_id,
            service,
            extra={
                "event": "ai_request",
                "service": service,
                "user_id": user_id,
                "request_id": request_id,
                "prompt_length": len(prompt) if prompt else 0,
            },
        )

    def on_retry(self, service, record, *, user_id, request_id):
        self.logger.warning(
            "[%s] AI service retry: %s attempt %d failed after %.0fms (%s), retrying in %.0fms",
            request_id,
            service,
            record.attempt,
            record.elapsed * 1000,
            record.error.kind.value,
            record.next_delay * 1000,
            extra={
                "event": "ai_retry",
                "service": service,
                "user_id": user_id,
                "request_id": request_id,
                "attempt": record.attempt,
                "elapsed_ms": round(record.elapsed * 1000, 2),
                "next_delay_ms": round(record.next_delay * 1000, 2),
                "kind": record.error.kind.value,
            },
        )

    def on_success(self, service, duration, attempts, *, user_id, request_id):
        self.logger.info(
            "[%s] AI service success: %s in %.0fms (%d attempt%s)",
            request_id,
            service,
            duration * 1000,
            attempts,
            "" if attempts == 1 else "s",
            extra={
                "event": "ai_success",
                "service": service,
                "user_id": user_id,
                "request_id": request_id,
                "duration_ms": round(duration * 1000, 2),
                "attempts": attempts,
            },
        )

    def on_error(self, service, error, attempts, *, user_id, request_id):
        self.logger.error(
            "[%s] AI service error: %s",
            request_id,
            error.message,
            extra={
                "event": "ai_error",
                "service": service,
                "user_id": user_id,
                "request_id": request_id,
                "error": error.message,
                "kind": error.kind.value,
                "attempts": attempts,
            },
        )
