import uuid
from datetime import timedelta

import pytest
from django.db import IntegrityError, OperationalError
from django.test import override_settings
from django.utils import timezone

from records.exceptions import ConflictError, DependencyError, NotFoundError, ValidationError
from records.models import AuditEvent, EmployeeRecord
from records.services import store as store_module
from records.services.links import build_lookup_url
from records.services.store import RecordStore

from .factories import make_payload

pytestmark = pytest.mark.django_db


@override_settings(BASE_URL='https://scan.example.com')
def test_create_then_get_derives_lookup_url_and_uppercases_id(store):
    record = store.create(make_payload(employeeId='emp001'))
    fetched = store.get(record.id)
    assert fetched.employee_id == 'EMP001'
    assert fetched.lookup_url == f'https://scan.example.com/employee/{record.id}'
    assert fetched.blood_group == 'O+'


def test_build_lookup_url_strips_trailing_slash():
    rid = uuid.UUID('12345678-1234-5678-1234-567812345678')
    assert build_lookup_url(rid, 'http://localhost:5173/') == \
        'http://localhost:5173/employee/12345678-1234-5678-1234-567812345678'


def test_duplicate_employee_id_differing_by_case_conflicts(store):
    store.create(make_payload(employeeId='emp001'))
    with pytest.raises(ConflictError):
        store.create(make_payload(employeeId='EMP001'))
    assert EmployeeRecord.objects.count() == 1


def test_unique_index_backs_the_precheck(store, monkeypatch):
    store.create(make_payload(employeeId='emp001'))
    # simulate a concurrent writer slipping in between check and insert
    monkeypatch.setattr(RecordStore, '_ensure_unique', lambda self, *a, **kw: None)
    with pytest.raises(ConflictError) as exc:
        store.create(make_payload(employeeId='emp001'))
    assert isinstance(exc.value.__cause__, IntegrityError)
    assert EmployeeRecord.objects.count() == 1


def test_create_reports_all_violations(store):
    with pytest.raises(ValidationError) as exc:
        store.create({'employeeId': 'x1'})
    fields = {e['field'] for e in exc.value.errors}
    assert {'name', 'dateOfBirth', 'bloodGroup', 'emergencyContacts', 'physician', 'insurance'} == fields
    assert EmployeeRecord.objects.count() == 0


def test_get_missing_and_malformed_ids(store):
    with pytest.raises(NotFoundError):
        store.get(uuid.uuid4())
    with pytest.raises(NotFoundError):
        store.get('not-a-uuid')


def test_list_is_newest_first(store):
    first = store.create(make_payload(employeeId='a1'))
    second = store.create(make_payload(employeeId='a2'))
    third = store.create(make_payload(employeeId='a3'))
    now = timezone.now()
    EmployeeRecord.objects.filter(pk=first.pk).update(created_at=now - timedelta(minutes=3))
    EmployeeRecord.objects.filter(pk=second.pk).update(created_at=now - timedelta(minutes=1))
    EmployeeRecord.objects.filter(pk=third.pk).update(created_at=now - timedelta(minutes=2))
    assert [r.employee_id for r in store.list()] == ['A2', 'A3', 'A1']


def test_update_merges_and_keeps_lookup_url(store):
    record = store.create(make_payload())
    original_url = record.lookup_url
    updated = store.update(record.id, {
        'name': 'Alice P. Perera',
        'lookupUrl': 'http://evil.example.com/employee/x',
        'id': str(uuid.uuid4()),
        'physician': {'phone': '+1-555-0000'},
    })
    assert updated.pk == record.pk
    assert updated.name == 'Alice P. Perera'
    assert updated.lookup_url == original_url
    # the physician object is merged, not replaced
    assert updated.physician == {'name': 'Dr. Grace Hopper', 'phone': '+1-555-0000', 'specialty': 'Cardiology'}
    assert updated.insurance['memberId'] == 'AH-100200'


def test_update_replaces_lists(store):
    record = store.create(make_payload())
    updated = store.update(record.id, {'allergies': ['Latex']})
    assert updated.allergies == ['Latex']
    assert updated.medications == record.medications


def test_update_cannot_remove_last_emergency_contact(store):
    record = store.create(make_payload())
    with pytest.raises(ValidationError) as exc:
        store.update(record.id, {'emergencyContacts': []})
    assert [e['field'] for e in exc.value.errors] == ['emergencyContacts']
    record.refresh_from_db()
    assert len(record.emergency_contacts) == 1


def test_update_rechecks_nested_required_fields(store):
    record = store.create(make_payload())
    with pytest.raises(ValidationError) as exc:
        store.update(record.id, {'insurance': {'provider': ''}})
    assert [e['field'] for e in exc.value.errors] == ['insurance.provider']


def test_update_to_taken_employee_id_conflicts(store):
    store.create(make_payload(employeeId='emp001'))
    other = store.create(make_payload(employeeId='emp002'))
    with pytest.raises(ConflictError):
        store.update(other.id, {'employeeId': 'Emp001'})
    # re-sending its own id is not a conflict
    assert store.update(other.id, {'employeeId': 'emp002'}).employee_id == 'EMP002'


def test_update_missing_record(store):
    with pytest.raises(NotFoundError):
        store.update(uuid.uuid4(), {'name': 'Nobody'})


def test_delete_twice_fails_the_second_time(store):
    record = store.create(make_payload())
    store.delete(record.id)
    with pytest.raises(NotFoundError):
        store.delete(record.id)
    with pytest.raises(NotFoundError):
        store.delete(uuid.uuid4())


def test_writes_are_audited(store, admin_user):
    record = store.create(make_payload(), user=admin_user)
    store.update(record.id, {'notes': ''}, user=admin_user)
    store.delete(record.id, user=admin_user)
    actions = list(AuditEvent.objects.filter(object_id=str(record.id)).order_by('id')
                   .values_list('action', 'user__username'))
    assert actions == [
        ('employee_create', 'admin1'),
        ('employee_update', 'admin1'),
        ('employee_delete', 'admin1'),
    ]


def test_unavailable_store_fails_fast(store):
    store.mark_unavailable('connection refused')
    for call in (lambda: store.list(), lambda: store.get(uuid.uuid4()),
                 lambda: store.create(make_payload()), lambda: store.delete(uuid.uuid4())):
        with pytest.raises(DependencyError):
            call()


def test_open_raises_dependency_error_when_unreachable(monkeypatch):
    class Broken:
        def ensure_connection(self):
            raise OperationalError('connection refused')

    monkeypatch.setattr(store_module, 'connections', {'default': Broken()})
    with pytest.raises(DependencyError):
        RecordStore().open()


def test_driver_errors_surface_as_dependency_error(store, monkeypatch):
    def boom(self):
        raise OperationalError('server has gone away')

    monkeypatch.setattr(RecordStore, '_queryset', boom)
    with pytest.raises(DependencyError):
        store.list()


def test_special_characters_are_stored_as_typed(store):
    record = store.create(make_payload(
        employeeId='r&d-01',
        allergies=['Reacts to doses > 5mg'],
        notes='BP < 90 & HR > 120',
    ))
    record.refresh_from_db()
    assert record.employee_id == 'R&D-01'
    assert record.allergies == ['Reacts to doses > 5mg']
    assert record.notes == 'BP < 90 & HR > 120'
    # the same id with different case still collides
    with pytest.raises(ConflictError):
        store.create(make_payload(employeeId='R&D-01'))


def test_full_length_note_of_special_characters_is_accepted(store):
    record = store.create(make_payload(notes='&' * 500))
    record.refresh_from_db()
    assert record.notes == '&' * 500


def test_update_keeps_stored_text_intact(store):
    record = store.create(make_payload(notes='BP < 90 & HR > 120'))
    updated = store.update(record.id, {'name': 'Alice P. Perera'})
    assert updated.notes == 'BP < 90 & HR > 120'


def _failing_audit(*args, **kwargs):
    raise OperationalError('audit table unavailable')


def test_failed_audit_rolls_back_create(store, monkeypatch):
    monkeypatch.setattr(store_module, 'log_action', _failing_audit)
    with pytest.raises(DependencyError):
        store.create(make_payload())
    assert EmployeeRecord.objects.count() == 0


def test_failed_audit_rolls_back_update_and_delete(store, monkeypatch):
    record = store.create(make_payload())
    monkeypatch.setattr(store_module, 'log_action', _failing_audit)
    with pytest.raises(DependencyError):
        store.update(record.id, {'name': 'Changed'})
    with pytest.raises(DependencyError):
        store.delete(record.id)
    record.refresh_from_db()
    assert record.name == 'Alice Perera'
