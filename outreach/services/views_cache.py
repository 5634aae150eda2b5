"""
Cached view data and path-based invalidation.

Each logical view path (``/patients``, ``/campaigns/<id>/runs``) owns a
version counter in the Django cache.  Readers key their cached payloads
on the current version; :func:`revalidate_path` bumps the counter so the
next read recomputes, and tells connected clients which paths went stale.
"""
import logging
from typing import Any, Callable, Iterable, Optional

from django.conf import settings
from django.core.cache import cache
from django.utils import timezone

from .realtime import UPDATES_GROUP, publish

logger = logging.getLogger(__name__)


def _version_key(path: str) -> str:
    return f'view-version:{path}'


def path_version(path: str) -> int:
    return cache.get_or_set(_version_key(path), 1, None)


def view_cache_key(path: str, *parts: Any) -> str:
    suffix = ':'.join(str(p) for p in parts)
    return f'view:{path}:v{path_version(path)}:{suffix}'


def cached_view_data(path: str, parts: Iterable[Any], compute: Callable[[], Any], timeout: Optional[int] = None) -> Any:
    """Return the cached payload for ``path``/``parts``, computing it on a miss."""
    key = view_cache_key(path, *parts)
    hit = cache.get(key)
    if hit is not None:
        return hit
    value = compute()
    cache.set(key, value, settings.VIEW_CACHE_TTL if timeout is None else timeout)
    return value


def revalidate_path(*paths: str) -> None:
    """Mark every view cached under ``paths`` as stale."""
    for path in paths:
        key = _version_key(path)
        try:
            cache.incr(key)
        except ValueError:
            cache.set(key, 2, None)
        logger.debug('revalidated %s', path)
    now = timezone.now()
    publish(UPDATES_GROUP, {
        'type': 'broadcast.refresh',
        'version': int(now.timestamp()),
        'ts': now.isoformat(),
        'paths': list(paths),
    })
