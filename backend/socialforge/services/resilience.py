"""
SocialForge Backend — Resilient Invocation of Generative AI Calls
==================================================================

What:  Runs a fallible async operation with a per-attempt timeout, classifies
       failures into an ErrorKind, and retries with capped exponential backoff
       plus jitter.
How:   tenacity.AsyncRetrying drives the attempt loop. Each attempt runs the
       operation as an asyncio task raced against the timeout; any raw failure
       is classified into an AIServiceError before tenacity decides whether to
       retry. The wait strategy is wait_capped_exponential_jitter below.
Who:   AIService wraps every Gemini/Imagen/Veo call in ResilientInvoker.invoke().

Attempt lifecycle:
    Idle → Attempting(1)
    Attempting(k) → Succeeded                  operation returned
    Attempting(k) → Failed                     non-retryable kind, or k == attempts
    Attempting(k) → Sleeping(k) → Attempting(k+1)

Backoff before attempt k+1:
    d = min(max_delay, base_delay * multiplier^(k-1))
    sleep(d + uniform(0, 0.1 * d))
    Example (1s base, x2, 10s cap): ~1s, ~2s, ~4s, ~8s, ~10s, ~10s ...

Classification (first match wins, message matched case-insensitively):
    typed timeout (TimeoutError, DeadlineExceeded)   → TIMEOUT
    "timeout" in message                              → TIMEOUT
    "rate limit" in message or status == 429          → RATE_LIMITED
    "quota" / "billing" in message                    → QUOTA_EXCEEDED
    status >= 500 or "unavailable" in message         → SERVICE_UNAVAILABLE
    400 <= status < 500                               → CLIENT_ERROR
    anything else (including non-exception values)    → UNKNOWN

    The status comes from structured attributes when the SDK exposes them
    (google.api_core's ``code``, httpx/requests ``response.status_code``,
    Stripe's ``http_status``); message matching is the fallback for untyped
    errors.

Operations must be safe to repeat: a timed-out attempt is cancelled locally,
but the remote side may still have completed it.
"""

import asyncio
import logging
import random
import time
import uuid
from typing import Any, Awaitable, Callable, Dict, Optional, TypeVar

from google.api_core import exceptions as google_exceptions
from tenacity import AsyncRetrying, RetryCallState, retry_if_exception, stop_after_attempt
from tenacity.wait import wait_base

from socialforge.config import InvocationConfig
from socialforge.exceptions import AIServiceError, ErrorKind
from socialforge.observability import (
    AttemptRecord,
    InvocationObserver,
    LoggingObserver,
    request_id_var,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Jitter is a fraction of the computed delay, drawn from [0, JITTER_RATIO)
JITTER_RATIO = 0.1

_TIMEOUT_TYPES = (TimeoutError, asyncio.TimeoutError, google_exceptions.DeadlineExceeded)
_STATUS_ATTRIBUTES = ("status", "status_code", "http_status", "code")


# ══════════════════════════════════════════════════════════════════════════
# Error Classification
# ══════════════════════════════════════════════════════════════════════════

def _as_status(value: Any) -> Optional[int]:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return None


def _status_of(error: object) -> Optional[int]:
    """HTTP-like status from the error's structured attributes, if any."""
    for attr in _STATUS_ATTRIBUTES:
        status = _as_status(getattr(error, attr, None))
        if status is not None:
            return status
    response = getattr(error, "response", None)
    return _as_status(getattr(response, "status_code", None))


def _message_of(error: object) -> Optional[str]:
    if isinstance(error, BaseException):
        return str(error) or None
    message = getattr(error, "message", None)
    return message if isinstance(message, str) and message else None


def _retry_after_of(error: object) -> Any:
    retry_after = getattr(error, "retry_after", None)
    if retry_after is not None:
        return retry_after
    headers = getattr(getattr(error, "response", None), "headers", None)
    if hasattr(headers, "get"):
        return headers.get("Retry-After")
    return None


def _details(**fields: Any) -> Dict[str, Any]:
    return {key: value for key, value in fields.items() if value is not None}


def classify_error(error: object, service: str) -> AIServiceError:
    """
    Normalize any failure into an AIServiceError.

    Pure: no logging, no I/O. An AIServiceError is returned unchanged, so the
    invoker's own timeout errors keep their message.

    Args:
        error:    Whatever the operation raised (or, defensively, any value)
        service:  Originating service label used in the message

    Returns:
        A new AIServiceError tagged with the matching ErrorKind.
    """
    if isinstance(error, AIServiceError):
        return error

    message = _message_of(error)
    text = (message or "").lower()
    status = _status_of(error)

    if isinstance(error, _TIMEOUT_TYPES) or "timeout" in text:
        return AIServiceError(
            ErrorKind.TIMEOUT,
            service,
            f"{service} service timeout",
            _details(original_error=message),
        )

    if "rate limit" in text or status == 429:
        return AIServiceError(
            ErrorKind.RATE_LIMITED,
            service,
            f"{service} rate limit exceeded",
            _details(status=status, retry_after=_retry_after_of(error)),
        )

    if "quota" in text or "billing" in text:
        return AIServiceError(
            ErrorKind.QUOTA_EXCEEDED,
            service,
            f"{service} quota exceeded",
            _details(status=status, original_error=message),
        )

    if (status is not None and status >= 500) or "unavailable" in text:
        return AIServiceError(
            ErrorKind.SERVICE_UNAVAILABLE,
            service,
            f"{service} service unavailable",
            _details(status=status, original_error=message),
        )

    if status is not None and 400 <= status < 500:
        return AIServiceError(
            ErrorKind.CLIENT_ERROR,
            service,
            f"{service} client error: {message}",
            _details(status=status),
        )

    return AIServiceError(
        ErrorKind.UNKNOWN,
        service,
        f"{service} service error: {message or 'Unknown error'}",
        _details(original_error=message or repr(error)),
    )


def is_retryable(error: BaseException) -> bool:
    """tenacity retry predicate: only classified, retryable errors are retried."""
    return isinstance(error, AIServiceError) and error.retryable


# ══════════════════════════════════════════════════════════════════════════
# Backoff
# ══════════════════════════════════════════════════════════════════════════

def base_backoff(attempt: int, config: InvocationConfig) -> float:
    """Un-jittered delay after failed attempt ``attempt`` (1-based)."""
    try:
        delay = config.base_delay * config.multiplier ** (attempt - 1)
    except OverflowError:
        return config.max_delay
    return min(config.max_delay, delay)


def compute_backoff(
    attempt: int,
    config: InvocationConfig,
    rng: Callable[[], float] = random.random,
) -> float:
    """Delay after failed attempt ``attempt``, in [d, d * 1.1)."""
    delay = base_backoff(attempt, config)
    return delay + rng() * JITTER_RATIO * delay


class wait_capped_exponential_jitter(wait_base):
    """
    tenacity wait strategy implementing compute_backoff().

    tenacity's wait_exponential_jitter adds an absolute jitter; this one adds
    jitter proportional to the capped delay.
    """

    def __init__(self, config: InvocationConfig, rng: Callable[[], float] = random.random):
        self.config = config
        self.rng = rng

    def __call__(self, retry_state: RetryCallState) -> float:
        return compute_backoff(retry_state.attempt_number, self.config, self.rng)


# ══════════════════════════════════════════════════════════════════════════
# Resilient Invoker
# ══════════════════════════════════════════════════════════════════════════

class _Invocation:
    """Per-call bookkeeping; never shared between invocations."""

    def __init__(self, service: str, user_id: Optional[int], request_id: str):
        self.service = service
        self.user_id = user_id
        self.request_id = request_id
        self.started = time.perf_counter()
        self.attempt_started = self.started
        self.attempts = 0

    def begin_attempt(self) -> None:
        self.attempts += 1
        self.attempt_started = time.perf_counter()


class ResilientInvoker:
    """
    Executes async operations with timeout, classification and retry.

    One instance per logical service family, built explicitly and injected
    into whatever needs it. The instance holds only immutable policy, the
    observer and the sleep function, so concurrent invoke() calls are
    independent.

    Args:
        config:    Default policy; invoke() may override it per call
        observer:  Event sink (default: LoggingObserver)
        sleep:     Awaitable sleep used between attempts (tests inject a fake)
        rng:       Source of [0, 1) floats for jitter
    """

    def __init__(
        self,
        config: Optional[InvocationConfig] = None,
        observer: Optional[InvocationObserver] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        rng: Callable[[], float] = random.random,
    ):
        self.config = config or InvocationConfig()
        self.observer = observer if observer is not None else LoggingObserver()
        self._sleep = sleep
        self._rng = rng

    async def invoke(
        self,
        operation: Callable[[], Awaitable[T]],
        service: str,
        *,
        user_id: Optional[int] = None,
        request_id: Optional[str] = None,
        prompt: Optional[str] = None,
        config: Optional[InvocationConfig] = None,
    ) -> T:
        """
        Run ``operation`` until it succeeds, fails fatally, or attempts run out.

        Args:
            operation:   Zero-argument callable returning an awaitable
            service:     Label used for classification messages and events
            user_id:     Correlation id (observability only)
            request_id:  Correlation id; defaults to request_id_var, then a short uuid
            prompt:      Operation descriptor; only its length is logged
            config:      Per-call policy override

        Returns:
            The operation's result, unchanged.

        Raises:
            AIServiceError: The last classified error.
        """
        cfg = config or self.config
        call = _Invocation(
            service,
            user_id,
            request_id or request_id_var.get() or uuid.uuid4().hex[:8],
        )
        self._notify("on_request", service, user_id=user_id,
                     request_id=call.request_id, prompt=prompt)

        retrying = AsyncRetrying(
            stop=stop_after_attempt(cfg.attempts),
            wait=wait_capped_exponential_jitter(cfg, self._rng),
            retry=retry_if_exception(is_retryable),
            before_sleep=lambda retry_state: self._before_sleep(call, retry_state),
            sleep=self._sleep,
            reraise=True,
        )

        try:
            async for attempt in retrying:
                with attempt:
                    call.begin_attempt()
                    result = await self._attempt(operation, service, cfg)
        except AIServiceError as exc:
            self._notify("on_error", service, exc, call.attempts,
                         user_id=user_id, request_id=call.request_id)
            raise

        self._notify("on_success", service, time.perf_counter() - call.started, call.attempts,
                     user_id=user_id, request_id=call.request_id)
        return result

    async def _attempt(
        self,
        operation: Callable[[], Awaitable[T]],
        service: str,
        cfg: InvocationConfig,
    ) -> T:
        """One attempt: race the operation against the timeout, classify failures."""
        task = asyncio.ensure_future(self._call(operation))
        try:
            done, _ = await asyncio.wait({task}, timeout=cfg.timeout)
        except asyncio.CancelledError:
            task.cancel()
            raise

        if task not in done:
            task.cancel()
            raise AIServiceError(
                ErrorKind.TIMEOUT,
                service,
                f"{service} service timeout after {cfg.timeout:g}s",
                {"timeout": cfg.timeout},
            )

        try:
            return task.result()
        except Exception as exc:
            classified = classify_error(exc, service)
            if classified is exc:
                raise
            raise classified from exc

    @staticmethod
    async def _call(operation: Callable[[], Awaitable[T]]) -> T:
        return await operation()

    def _before_sleep(self, call: _Invocation, retry_state: RetryCallState) -> None:
        error = retry_state.outcome.exception() if retry_state.outcome else None
        if not isinstance(error, AIServiceError):
            return
        record = AttemptRecord(
            attempt=retry_state.attempt_number,
            elapsed=time.perf_counter() - call.attempt_started,
            error=error,
            next_delay=retry_state.next_action.sleep if retry_state.next_action else 0.0,
        )
        self._notify("on_retry", call.service, record,
                     user_id=call.user_id, request_id=call.request_id)

    def _notify(self, hook: str, *args: Any, **kwargs: Any) -> None:
        try:
            getattr(self.observer, hook)(*args, **kwargs)
        except Exception:
            logger.warning("Invocation observer hook %s failed", hook, exc_info=True)
