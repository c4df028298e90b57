"""
Resilience Patterns

Provides the backend error taxonomy, retry policies with exponential
backoff and circuit breakers for calls into the leaderboard database.
"""

import logging
from typing import Optional

from circuitbreaker import circuit, CircuitBreaker, CircuitBreakerError
from tenacity import (
    Retrying,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
    before_sleep_log,
    RetryError,
)


# -----------------------------------------------------------------------------
# Custom Exceptions
# -----------------------------------------------------------------------------


class RetryableError(Exception):
    """Base class for errors that should trigger retries."""

    pass


class TransientBackendError(RetryableError):
    """Raised when a read fails for a reason that may go away (lost connection, lock timeout)."""

    pass


class ServiceUnavailableError(Exception):
    """Raised when reads keep failing after all retries, or the circuit is open."""

    def __init__(self, message: str = "Service unavailable", cause: Optional[Exception] = None):
        super().__init__(message)
        self.cause = cause


class BackendWriteError(Exception):
    """Raised when a write fails. Writes are never retried."""

    def __init__(self, operation: str, reason: str):
        super().__init__(f"{operation} failed: {reason}")
        self.operation = operation
        self.reason = reason


# -----------------------------------------------------------------------------
# Retry Policies
# -----------------------------------------------------------------------------


def create_retrying(
    max_attempts: int = 3,
    base_delay: float = 0.5,
    max_delay: float = 8.0,
    logger: Optional[logging.Logger] = None,
) -> Retrying:
    """
    Create a tenacity Retrying controller with exponential backoff.

    Only RetryableError subclasses are retried; anything else propagates
    on the first attempt. The last RetryableError is re-raised once
    attempts are exhausted.

    Example:
        retrying = create_retrying(max_attempts=3)
        rows = retrying(load_rows)
    """
    return Retrying(
        stop=stop_after_attempt(max_attempts),
        wait=wait_exponential(multiplier=base_delay, max=max_delay),
        retry=retry_if_exception_type(RetryableError),
        before_sleep=before_sleep_log(logger, logging.WARNING) if logger else None,
        reraise=True,
    )


# -----------------------------------------------------------------------------
# Circuit Breakers
# -----------------------------------------------------------------------------


def create_circuit_breaker(
    name: str,
    failure_threshold: int = 5,
    recovery_timeout: int = 60,
) -> CircuitBreaker:
    """
    Create a circuit breaker decorator.

    Args:
        name: Name of the circuit breaker for identification
        failure_threshold: Number of failures before opening circuit
        recovery_timeout: Seconds to wait before attempting recovery
    """
    return circuit(
        failure_threshold=failure_threshold,
        recovery_timeout=recovery_timeout,
        expected_exception=RetryableError,
        name=name,
    )


def is_circuit_open(breaker: CircuitBreaker) -> bool:
    """Check if a circuit breaker is currently open."""
    return breaker.opened


__all__ = [
    "RetryableError",
    "TransientBackendError",
    "ServiceUnavailableError",
    "BackendWriteError",
    "CircuitBreakerError",
    "RetryError",
    "create_retrying",
    "create_circuit_breaker",
    "is_circuit_open",
]
