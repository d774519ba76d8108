"""Planner exception hierarchy.

Base exceptions for all application layers with correlation ID support.

Usage:
    from src.exceptions import DALError, NotFoundError

    try:
        await repo.update(room_id, data)
    except NotFoundError as e:
        logger.warning("Room vanished (correlation_id=%s)", e.correlation_id)
"""

import uuid


class PlannerError(Exception):
    """Base exception for all planner application errors.

    Carries a correlation_id for tracing errors across layers.
    """

    def __init__(self, message: str, *, correlation_id: str | None = None):
        self.correlation_id = correlation_id or str(uuid.uuid4())
        super().__init__(message)


class DALError(PlannerError):
    """Errors from data access layer operations."""

    def __init__(self, message: str, *, collection: str | None = None, **kwargs):
        self.collection = collection
        super().__init__(message, **kwargs)


class NotFoundError(PlannerError):
    """A referenced record does not exist."""

    def __init__(
        self,
        message: str,
        *,
        collection: str | None = None,
        record_id: str | None = None,
        **kwargs,
    ):
        self.collection = collection
        self.record_id = record_id
        super().__init__(message, **kwargs)


class ValidationError(PlannerError):
    """Errors from input validation (beyond Pydantic)."""

    pass


class QuotaExceededError(PlannerError):
    """Marking an instance owned would exceed the device's purchased quantity."""

    def __init__(self, message: str, *, device_id: str, owned: int, used: int, **kwargs):
        self.device_id = device_id
        self.owned = owned
        self.used = used
        super().__init__(message, **kwargs)


class ConfigurationError(PlannerError):
    """Errors from application configuration."""

    pass
