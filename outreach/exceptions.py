"""
Error taxonomy raised by auth helpers and actions, plus the DRF handler
that renders every failure as ``{'ok': False, 'error': {...}}``.
"""
from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler


class Unauthenticated(exceptions.NotAuthenticated):
    default_detail = 'Authentication required'
    default_code = 'unauthenticated'


class Forbidden(exceptions.PermissionDenied):
    default_detail = 'Admin privileges required'
    default_code = 'forbidden'


class NoOrganization(Forbidden):
    default_detail = 'Organization required'
    default_code = 'no_organization'


class ValidationFailed(exceptions.ValidationError):
    default_code = 'validation_error'


class ActionError(exceptions.APIException):
    """A service-layer failure; carries the service message and nothing else."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Request failed'
    default_code = 'action_failed'


class IntegrationError(exceptions.APIException):
    status_code = status.HTTP_502_BAD_GATEWAY
    default_detail = 'Upstream provider returned no result'
    default_code = 'integration_error'


def api_exception_handler(exc, context):
    resp = drf_exception_handler(exc, context)
    if resp is None:
        return Response({'ok': False, 'error': {'code': 'server_error', 'message': str(exc)}}, status=500)
    code = getattr(exc, 'default_code', None) or 'api_error'
    if isinstance(exc, exceptions.ValidationError):
        detail = resp.data
    elif isinstance(resp.data, dict):
        detail = resp.data.get('detail') or resp.data
    else:
        detail = str(resp.data)
    return Response({'ok': False, 'error': {'code': code, 'message': detail}}, status=resp.status_code)
