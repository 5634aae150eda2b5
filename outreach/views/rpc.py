import json

from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import MethodNotAllowed, ParseError
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from ..api.root import app_router
from ..auth import get_auth_context
from ..rpc import METHODS, QUERY, resolve


def _read_input(request, kind):
    if kind == QUERY:
        raw = request.query_params.get('input')
        if raw in (None, ''):
            return None
        try:
            return json.loads(raw)
        except ValueError:
            raise ParseError('input is not valid JSON')
    return request.data if request.data else None


@api_view(['GET', 'POST'])
@permission_classes([AllowAny])
def rpc_view(request, path):
    # guards run inside the procedure so the in-process caller gets the same checks
    proc = resolve(app_router, path)
    if request.method != METHODS[proc.kind]:
        raise MethodNotAllowed(request.method)
    ctx = get_auth_context(request)
    data = proc.invoke(ctx, _read_input(request, proc.kind), path)
    return Response({'ok': True, 'data': data})
