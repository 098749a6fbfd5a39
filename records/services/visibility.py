"""
Projections of an :class:`EmployeeRecord` into API payloads.

``public_view`` is what anyone scanning an employee's QR code receives;
``full_view`` is what authenticated administrators see.  Both read from
the same canonical record, and ``age`` is computed at call time.
"""
from __future__ import annotations

from datetime import date

from records.models import EmployeeRecord, age_on

PUBLIC_FIELDS = (
    'id',
    'name',
    'age',
    'dateOfBirth',
    'bloodGroup',
    'allergies',
    'medications',
    'emergencyContacts',
    'physician',
    'medicalConditions',
    'notes',
)


def _username(user) -> str | None:
    return user.username if user is not None else None


def public_view(record: EmployeeRecord, today: date | None = None) -> dict:
    """Emergency data only: no insurance, employee ID or audit fields."""
    return {
        'id': str(record.id),
        'name': record.name,
        'age': age_on(record.date_of_birth, today),
        'dateOfBirth': record.date_of_birth.isoformat(),
        'bloodGroup': record.blood_group,
        'allergies': list(record.allergies),
        'medications': [dict(m) for m in record.medications],
        'emergencyContacts': [dict(c) for c in record.emergency_contacts],
        'physician': dict(record.physician),
        'medicalConditions': list(record.medical_conditions),
        'notes': record.notes,
    }


def full_view(record: EmployeeRecord, today: date | None = None) -> dict:
    data = public_view(record, today)
    data.update({
        'employeeId': record.employee_id,
        'insurance': dict(record.insurance),
        'lookupUrl': record.lookup_url,
        'createdAt': record.created_at.isoformat() if record.created_at else None,
        'updatedAt': record.updated_at.isoformat() if record.updated_at else None,
        'createdBy': _username(record.created_by),
        'updatedBy': _username(record.updated_by),
    })
    return data
