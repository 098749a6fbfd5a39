"""
The employee record store.

:class:`RecordStore` is an explicitly constructed handle over one Django
database alias.  It owns the record lifecycle: every write normalises
the payload, re-runs the full invariant check and relies on the unique
index on ``employee_id`` as the final word on duplicates.  The link
generator runs exactly once, inside :meth:`RecordStore.create`.
"""
from __future__ import annotations

import logging
import uuid
from functools import wraps

from django.db import DatabaseError, IntegrityError, InterfaceError, OperationalError, connections, transaction

from records.exceptions import ConflictError, DependencyError, NotFoundError
from records.models import EmployeeRecord
from records.services.audit import log_action
from records.services.links import build_lookup_url
from records.services.validation import FIELD_ALIASES, canonical_payload, clean_employee, record_payload

logger = logging.getLogger(__name__)

# nested objects merged key-by-key on update instead of being replaced
MERGED_OBJECTS = ('physician', 'insurance')


def _store_operation(func):
    """Fail fast when the store is down and map driver errors."""
    @wraps(func)
    def wrapper(self, *args, **kwargs):
        if not self.available:
            raise DependencyError(f'Record store unavailable: {self.unavailable_reason}')
        try:
            return func(self, *args, **kwargs)
        except (OperationalError, InterfaceError) as e:
            logger.error('record store error in %s: %s', func.__name__, e)
            raise DependencyError('Record store unavailable') from e
    return wrapper


def _parse_id(record_id) -> uuid.UUID:
    if isinstance(record_id, uuid.UUID):
        return record_id
    try:
        return uuid.UUID(str(record_id))
    except (TypeError, ValueError, AttributeError):
        raise NotFoundError()


class RecordStore:
    def __init__(self, using: str = 'default'):
        self.using = using
        self.available = True
        self.unavailable_reason: str | None = None

    # ------------------------------------------------------------------
    # lifecycle
    # ------------------------------------------------------------------
    def open(self) -> None:
        """Check connectivity; raise :class:`DependencyError` if unreachable."""
        try:
            connections[self.using].ensure_connection()
        except DatabaseError as e:
            raise DependencyError(f'Cannot connect to record store "{self.using}": {e}') from e
        self.available = True
        self.unavailable_reason = None
        logger.info('record store "%s" connected', self.using)

    def close(self) -> None:
        connections[self.using].close()
        logger.info('record store "%s" closed', self.using)

    def mark_unavailable(self, reason: str) -> None:
        self.available = False
        self.unavailable_reason = reason

    # ------------------------------------------------------------------
    # queries
    # ------------------------------------------------------------------
    def _queryset(self):
        return EmployeeRecord.objects.using(self.using).select_related('created_by', 'updated_by')

    @_store_operation
    def get(self, record_id) -> EmployeeRecord:
        obj = self._queryset().filter(pk=_parse_id(record_id)).first()
        if obj is None:
            raise NotFoundError()
        return obj

    @_store_operation
    def list(self) -> list[EmployeeRecord]:
        return list(self._queryset().order_by('-created_at'))

    def _ensure_unique(self, employee_id: str, exclude_pk=None) -> None:
        # only for a clean 409 before the write; the unique index decides races
        qs = EmployeeRecord.objects.using(self.using).filter(employee_id=employee_id)
        if exclude_pk is not None:
            qs = qs.exclude(pk=exclude_pk)
        if qs.exists():
            raise ConflictError()

    def _save(self, obj: EmployeeRecord, audit: dict, **kwargs) -> None:
        """Save ``obj`` and its audit entry in one transaction."""
        with transaction.atomic(using=self.using):
            try:
                obj.save(using=self.using, **kwargs)
            except IntegrityError as e:
                # a concurrent writer took the same employee ID after our pre-check
                raise ConflictError() from e
            log_action(using=self.using, object_type='employee', object_id=obj.id, **audit)

    # ------------------------------------------------------------------
    # writes
    # ------------------------------------------------------------------
    @_store_operation
    def create(self, payload: dict, *, user=None) -> EmployeeRecord:
        data = clean_employee(payload)
        self._ensure_unique(data['employee_id'])

        obj = EmployeeRecord(id=uuid.uuid4(), created_by=user, updated_by=user, **data)
        obj.lookup_url = build_lookup_url(obj.id)
        self._save(obj, {'user': user, 'action': 'employee_create', 'detail': {'employeeId': obj.employee_id}},
                   force_insert=True)
        logger.info('employee %s created (%s)', obj.employee_id, obj.id)
        return obj

    @_store_operation
    def update(self, record_id, payload: dict, *, user=None) -> EmployeeRecord:
        obj = self.get(record_id)
        changes = canonical_payload(payload)

        merged = record_payload(obj)
        for key, value in changes.items():
            if key in MERGED_OBJECTS and isinstance(value, dict) and isinstance(merged[key], dict):
                merged[key] = {**merged[key], **value}
            else:
                merged[key] = value

        data = clean_employee(merged)
        if data['employee_id'] != obj.employee_id:
            self._ensure_unique(data['employee_id'], exclude_pk=obj.pk)

        for field, value in data.items():
            setattr(obj, field, value)
        if user is not None:
            obj.updated_by = user
        self._save(obj, {'user': user, 'action': 'employee_update',
                         'detail': {'fields': sorted({FIELD_ALIASES[k] for k in changes})}})
        logger.info('employee %s updated (%s)', obj.employee_id, obj.id)
        return obj

    @_store_operation
    def delete(self, record_id, *, user=None) -> None:
        obj = self.get(record_id)
        pk, employee_id = obj.pk, obj.employee_id
        with transaction.atomic(using=self.using):
            obj.delete(using=self.using)
            log_action(user=user, action='employee_delete', object_type='employee', object_id=pk,
                       detail={'employeeId': employee_id}, using=self.using)
        logger.info('employee %s deleted (%s)', employee_id, pk)
