"""
Success/error envelope returned by every service-layer call.

A result is either :class:`Success` carrying ``data`` or :class:`Failure`
carrying a :class:`ServiceError`.  Callers branch on :func:`is_error`
rather than poking at attributes so the error shape can change without
touching call sites.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Generic, Optional, TypeVar, Union

from django.conf import settings

logger = logging.getLogger(__name__)

T = TypeVar('T')

NOT_FOUND = 'NOT_FOUND'
BAD_REQUEST = 'BAD_REQUEST'
UNAUTHORIZED = 'UNAUTHORIZED'
FORBIDDEN = 'FORBIDDEN'
CONFLICT = 'CONFLICT'
INTERNAL_ERROR = 'INTERNAL_ERROR'
VALIDATION_ERROR = 'VALIDATION_ERROR'

ERROR_CODES = frozenset({
    NOT_FOUND, BAD_REQUEST, UNAUTHORIZED, FORBIDDEN, CONFLICT, INTERNAL_ERROR, VALIDATION_ERROR,
})


@dataclass(frozen=True)
class ServiceError:
    code: str
    message: str
    details: Any = None


@dataclass(frozen=True)
class Success(Generic[T]):
    data: T
    ok: bool = True


@dataclass(frozen=True)
class Failure:
    error: ServiceError
    ok: bool = False


ServiceResult = Union[Success[T], Failure]


def is_error(result: ServiceResult) -> bool:
    if isinstance(result, Failure):
        return True
    if isinstance(result, Success):
        return False
    raise TypeError(f'not a service result: {result!r}')


def is_success(result: ServiceResult) -> bool:
    return not is_error(result)


def create_success(data: T) -> Success[T]:
    return Success(data=data)


def create_error(code: str, message: str, details: Optional[Any] = None) -> Failure:
    if code not in ERROR_CODES:
        raise ValueError(f'unknown error code: {code}')
    if settings.DEBUG and details is not None:
        logger.debug('[service error] %s: %s (%r)', code, message, details)
    return Failure(error=ServiceError(
        code=code,
        message=message,
        details=details if settings.DEBUG else None,
    ))


def handle_service_error(exc: BaseException, message: str = 'An unexpected error occurred') -> Failure:
    """Turn an unexpected exception into an ``INTERNAL_ERROR`` failure."""
    logger.exception('%s', message, exc_info=exc)
    return create_error(INTERNAL_ERROR, message, repr(exc))
