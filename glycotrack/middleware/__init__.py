"""Middleware package for the GlycoTrack API."""

from glycotrack.middleware.correlation import (
    CORRELATION_ID_HEADER,
    CorrelationIdMiddleware,
)

__all__ = ["CorrelationIdMiddleware", "CORRELATION_ID_HEADER"]
