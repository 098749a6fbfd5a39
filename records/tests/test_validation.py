from datetime import date, timedelta

import pytest
from django.utils import timezone

from records.exceptions import ValidationError
from records.services.validation import canonical_payload, clean_employee, validate_employee

from .factories import make_payload


def _fields(errors):
    return {e['field'] for e in errors}


def test_valid_payload_has_no_violations():
    assert validate_employee(make_payload()) == []


def test_cleaning_uppercases_and_trims():
    data = clean_employee(make_payload(employeeId='  emp001 ', bloodGroup=' ab- ', name='  Alice  '))
    assert data['employee_id'] == 'EMP001'
    assert data['blood_group'] == 'AB-'
    assert data['name'] == 'Alice'
    assert data['date_of_birth'] == date(1990, 5, 15)
    # blank list entries are dropped, the rest trimmed
    assert data['allergies'] == ['Penicillin', 'Peanuts']


def test_optional_parts_get_defaults():
    payload = make_payload(physician={'name': 'Dr. Who', 'phone': '1', 'specialty': None},
                           insurance={'provider': 'Acme', 'memberId': 'M1'})
    for key in ('allergies', 'medications', 'medicalConditions', 'notes'):
        del payload[key]
    data = clean_employee(payload)
    assert data['allergies'] == [] and data['medications'] == [] and data['medical_conditions'] == []
    assert data['notes'] == ''
    assert data['physician']['specialty'] == ''
    assert data['insurance'] == {'provider': 'Acme', 'memberId': 'M1', 'groupNumber': ''}


def test_dob_alias_and_datetime_input():
    payload = make_payload()
    del payload['dateOfBirth']
    payload['dob'] = '1985-01-02T00:00:00Z'
    assert clean_employee(payload)['date_of_birth'] == date(1985, 1, 2)


def test_canonical_date_of_birth_wins_over_alias():
    payload = canonical_payload(make_payload(dob='1970-01-01'))
    assert payload['dateOfBirth'] == '1990-05-15'
    assert 'dob' not in payload


def test_empty_payload_reports_every_required_field():
    errors = validate_employee({})
    assert _fields(errors) == {
        'employeeId', 'name', 'dateOfBirth', 'bloodGroup',
        'emergencyContacts', 'physician', 'insurance',
    }


def test_violations_are_not_short_circuited():
    payload = make_payload(
        bloodGroup='C+',
        emergencyContacts=[{'name': 'Ravi', 'phone': '', 'relationship': ''}],
        physician={'name': '', 'phone': ''},
        insurance={'provider': 'Acme'},
        notes='x' * 501,
    )
    assert _fields(validate_employee(payload)) == {
        'bloodGroup',
        'emergencyContacts[0].phone',
        'emergencyContacts[0].relationship',
        'physician.name',
        'physician.phone',
        'insurance.memberId',
        'notes',
    }


def test_clean_raises_with_every_violation():
    with pytest.raises(ValidationError) as exc:
        clean_employee(make_payload(name='', bloodGroup='Q'))
    assert _fields(exc.value.errors) == {'name', 'bloodGroup'}


def test_empty_emergency_contacts_rejected():
    errors = validate_employee(make_payload(emergencyContacts=[]))
    assert errors == [{'field': 'emergencyContacts', 'message': 'At least one emergency contact is required'}]


def test_medication_requires_name():
    errors = validate_employee(make_payload(medications=[{'dosage': '5mg'}]))
    assert _fields(errors) == {'medications[0].name'}


def test_wrong_shapes_are_reported_not_raised():
    errors = validate_employee(make_payload(allergies='peanuts', physician='Dr. Who', medications=['aspirin']))
    assert _fields(errors) == {'allergies', 'physician', 'medications[0]'}


def test_non_string_values_are_type_errors():
    errors = validate_employee(make_payload(employeeId=123, name=['Alice'], allergies=['ok', 7]))
    assert errors == [
        {'field': 'employeeId', 'message': 'Must be a string.'},
        {'field': 'name', 'message': 'Must be a string.'},
        {'field': 'allergies[1]', 'message': 'Must be a string.'},
    ]


def test_invalid_and_future_dates():
    assert _fields(validate_employee(make_payload(dateOfBirth='15/05/1990'))) == {'dateOfBirth'}
    tomorrow = timezone.localdate() + timedelta(days=1)
    errors = validate_employee(make_payload(dateOfBirth=tomorrow.isoformat()))
    assert errors == [{'field': 'dateOfBirth', 'message': 'Date of birth cannot be in the future'}]


def test_notes_limit_is_inclusive():
    assert validate_employee(make_payload(notes='x' * 500)) == []


def test_notes_limit_counts_characters_not_escapes():
    assert validate_employee(make_payload(notes='&' * 500)) == []
    assert _fields(validate_employee(make_payload(notes='&' * 501))) == {'notes'}


def test_markup_is_stripped_but_special_characters_kept():
    data = clean_employee(make_payload(
        employeeId='r&d-01',
        name='<b>Alice</b> Perera',
        allergies=['Reacts to doses > 5mg'],
        notes='BP < 90 & HR > 120',
        physician={'name': 'Dr. O\'Brien & Partners', 'phone': '+1-555-0199'},
    ))
    assert data['employee_id'] == 'R&D-01'
    assert data['name'] == 'Alice Perera'
    assert data['allergies'] == ['Reacts to doses > 5mg']
    assert data['notes'] == 'BP < 90 & HR > 120'
    assert data['physician']['name'] == "Dr. O'Brien & Partners"


def test_text_that_is_only_markup_is_blank():
    assert validate_employee(make_payload(name='<i></i>')) == [{'field': 'name', 'message': 'Name is required'}]


def test_every_blood_group_accepted_in_any_case():
    for group in ('a+', 'A-', 'b+', 'B-', 'ab+', 'AB-', 'o+', 'O-'):
        assert validate_employee(make_payload(bloodGroup=group)) == []
