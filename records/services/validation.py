"""
Validation of employee payloads.

Payloads use the API's camelCase keys.  :class:`EmployeeSerializer` checks
a complete record and reports every violation together; the helpers here
fold the ``dob`` alias, flatten DRF's error detail and translate the
cleaned data to model field names.  Nothing here touches the database.
"""
from __future__ import annotations

from records.exceptions import ValidationError, flatten_drf_errors
from records.serializers.employee import EmployeeSerializer

# API name -> model field.  ``dob`` is accepted as input only; older
# clients send it.
FIELD_ALIASES = {
    'employeeId': 'employee_id',
    'name': 'name',
    'dateOfBirth': 'date_of_birth',
    'dob': 'date_of_birth',
    'bloodGroup': 'blood_group',
    'allergies': 'allergies',
    'medications': 'medications',
    'emergencyContacts': 'emergency_contacts',
    'physician': 'physician',
    'insurance': 'insurance',
    'medicalConditions': 'medical_conditions',
    'notes': 'notes',
}


def canonical_payload(payload: dict) -> dict:
    """Known keys only, with ``dob`` folded into ``dateOfBirth``."""
    data = {k: v for k, v in payload.items() if k in FIELD_ALIASES and k != 'dob'}
    # the canonical name wins over the alias
    if 'dob' in payload and 'dateOfBirth' not in payload:
        data['dateOfBirth'] = payload['dob']
    return data


def record_payload(record) -> dict:
    """A stored record in its API shape, the base an update is merged onto."""
    return {api: getattr(record, field) for api, field in FIELD_ALIASES.items() if api != 'dob'}


def _check(payload: dict) -> EmployeeSerializer:
    serializer = EmployeeSerializer(data=canonical_payload(payload))
    serializer.is_valid()
    return serializer


def validate_employee(payload: dict) -> list[dict]:
    """Return every violation in a complete record; empty means it may be written."""
    return flatten_drf_errors(_check(payload).errors)


def clean_employee(payload: dict) -> dict:
    """Return the cleaned record keyed by model field.

    Raises :class:`ValidationError` carrying every violation.
    """
    serializer = _check(payload)
    if serializer.errors:
        raise ValidationError(flatten_drf_errors(serializer.errors))
    return {FIELD_ALIASES[k]: v for k, v in serializer.validated_data.items()}
