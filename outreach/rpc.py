"""
Remote-procedure routing.

Procedures are grouped into sub-routers, one per namespace, and the
namespaces are combined into a single read-only application router at
import time.  The same router backs two entry points:

* ``outreach.views.rpc.rpc_view``, the HTTP handler mounted at ``api/rpc/<ns>.<proc>``
  (``GET ?input=<json>`` for queries, ``POST`` with a JSON body for
  mutations), and
* :func:`create_caller_factory`, which returns in-process callers so
  server code can run ``caller.patient.getAll({...})`` without going
  through HTTP.

Every invocation runs the procedure's guard first and is timed.
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Callable, Dict, Mapping

from rest_framework.exceptions import NotFound

from .auth import AuthContext, require_auth, require_org, require_super_admin

logger = logging.getLogger(__name__)

QUERY = 'query'
MUTATION = 'mutation'

PUBLIC = 'public'
PROTECTED = 'protected'
ORG = 'org'
SUPER_ADMIN = 'super_admin'

GUARDS: Mapping[str, Callable[[AuthContext], Any]] = MappingProxyType({
    PUBLIC: lambda ctx: ctx,
    PROTECTED: require_auth,
    ORG: require_org,
    SUPER_ADMIN: require_super_admin,
})

METHODS = MappingProxyType({QUERY: 'GET', MUTATION: 'POST'})


@dataclass(frozen=True)
class Procedure:
    handler: Callable[[AuthContext, Any], Any]
    kind: str = QUERY
    guard: str = PROTECTED

    def __post_init__(self):
        if self.kind not in METHODS:
            raise ValueError(f'unknown procedure kind: {self.kind}')
        if self.guard not in GUARDS:
            raise ValueError(f'unknown guard: {self.guard}')

    def invoke(self, ctx: AuthContext, input: Any = None, path: str = '') -> Any:
        start = time.perf_counter()
        try:
            GUARDS[self.guard](ctx)
            return self.handler(ctx, input)
        finally:
            elapsed = (time.perf_counter() - start) * 1000
            logger.info('[rpc] %s took %.0fms', path or self.handler.__name__, elapsed)


def query(handler=None, *, guard: str = PROTECTED):
    if handler is None:
        return lambda fn: Procedure(fn, QUERY, guard)
    return Procedure(handler, QUERY, guard)


def mutation(handler=None, *, guard: str = PROTECTED):
    if handler is None:
        return lambda fn: Procedure(fn, MUTATION, guard)
    return Procedure(handler, MUTATION, guard)


class Router:
    """A fixed set of named procedures."""

    def __init__(self, procedures: Dict[str, Procedure]):
        for name, proc in procedures.items():
            if not isinstance(proc, Procedure):
                raise TypeError(f'{name} is not a procedure')
        self.procedures: Mapping[str, Procedure] = MappingProxyType(dict(procedures))

    def __contains__(self, name: str) -> bool:
        return name in self.procedures

    def __getitem__(self, name: str) -> Procedure:
        return self.procedures[name]


def create_router(namespaces: Dict[str, Router]) -> Mapping[str, Router]:
    """Combine sub-routers into the read-only application router."""
    for name, sub in namespaces.items():
        if not isinstance(sub, Router):
            raise TypeError(f'{name} is not a router')
    return MappingProxyType(dict(namespaces))


def resolve(app_router: Mapping[str, Router], path: str) -> Procedure:
    ns, _, name = path.partition('.')
    sub = app_router.get(ns)
    if sub is None or not name or name not in sub:
        raise NotFound(f'No procedure found on path "{path}"')
    return sub[name]


class _NamespaceCaller:
    def __init__(self, ctx: AuthContext, namespace: str, router: Router):
        self._ctx = ctx
        self._namespace = namespace
        self._router = router

    def __getattr__(self, name: str):
        if name.startswith('_') or name not in self._router:
            raise AttributeError(f'{self._namespace}.{name}')
        proc = self._router[name]
        path = f'{self._namespace}.{name}'

        def call(input: Any = None):
            return proc.invoke(self._ctx, input, path)
        call.__name__ = name
        return call


class Caller:
    """In-process client bound to one :class:`AuthContext`."""

    def __init__(self, app_router: Mapping[str, Router], ctx: AuthContext):
        self._app_router = app_router
        self._ctx = ctx

    def __getattr__(self, namespace: str) -> _NamespaceCaller:
        if namespace.startswith('_') or namespace not in self._app_router:
            raise AttributeError(namespace)
        return _NamespaceCaller(self._ctx, namespace, self._app_router[namespace])


def create_caller_factory(app_router: Mapping[str, Router]) -> Callable[[AuthContext], Caller]:
    def create_caller(ctx: AuthContext) -> Caller:
        return Caller(app_router, ctx)
    return create_caller

