"""
Record store startup policy.

In production an unreachable database at startup is fatal.  Anywhere
else the failure is logged, the store is marked unavailable and every
record operation afterwards fails fast with ``DependencyError``.
"""
from __future__ import annotations

import atexit
import logging

from django.apps import apps
from django.conf import settings

from records.exceptions import DependencyError
from records.services.store import RecordStore

logger = logging.getLogger(__name__)


def get_store() -> RecordStore:
    return apps.get_app_config('records').store


def open_store(store: RecordStore | None = None, env: str | None = None) -> RecordStore:
    store = store or get_store()
    env = env or settings.ENV
    try:
        store.open()
    except DependencyError as e:
        if env == 'prod':
            logger.critical('record store unavailable at startup: %s', e.message)
            raise
        logger.error('record store unavailable at startup, continuing without persistence (ENV=%s): %s',
                     env, e.message)
        store.mark_unavailable(e.message)
        return store
    atexit.register(store.close)
    return store
