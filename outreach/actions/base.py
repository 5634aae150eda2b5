"""
Shared steps of the action pipeline.

An action authenticates with one of the ``require_*`` helpers, validates
its payload with :func:`validate`, calls a service and hands the result
to :func:`unwrap` (or :func:`unwrap_or_none` for lookups).
"""
from typing import Any, Dict, Optional, Type

from rest_framework import serializers

from outreach.exceptions import ActionError, ValidationFailed
from outreach.results import NOT_FOUND, ServiceResult, is_error


def validate(serializer_class: Type[serializers.Serializer], data: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    s = serializer_class(data=data if data is not None else {})
    if not s.is_valid():
        raise ValidationFailed(s.errors)
    return dict(s.validated_data)


def unwrap(result: ServiceResult) -> Any:
    if is_error(result):
        raise ActionError(result.error.message)
    return result.data


def unwrap_or_none(result: ServiceResult) -> Any:
    if is_error(result) and result.error.code == NOT_FOUND:
        return None
    return unwrap(result)
