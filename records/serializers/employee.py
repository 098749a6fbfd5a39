import datetime
import html

import bleach
from django.utils import timezone
from django.utils.dateparse import parse_datetime
from rest_framework import serializers

from records.models import BLOOD_GROUPS, NOTES_MAX_LENGTH


def strip_markup(value: str) -> str:
    """Remove HTML tags but keep the characters a person typed.

    ``bleach.clean`` entity-escapes what it keeps; the record is JSON, so
    the escapes are undone before storing.
    """
    return html.unescape(bleach.clean(value, tags=[], strip=True)).strip()


def _required(label):
    message = f'{label} is required'
    return {'required': message, 'blank': message, 'null': message}


class StringField(serializers.CharField):
    """CharField that accepts JSON strings only; null means blank when blank is allowed."""
    default_error_messages = {'invalid': 'Must be a string.'}

    def validate_empty_values(self, data):
        if data is None and self.allow_blank:
            return (True, '')
        return super().validate_empty_values(data)

    def to_internal_value(self, data):
        if not isinstance(data, str):
            self.fail('invalid')
        return super().to_internal_value(data)


class TextField(StringField):
    def to_internal_value(self, data):
        value = strip_markup(super().to_internal_value(data))
        if not value and not self.allow_blank:
            self.fail('blank')
        return value


def _optional_text(**kwargs):
    return TextField(required=False, allow_blank=True, default='', **kwargs)


class BloodGroupField(serializers.ChoiceField):
    def to_internal_value(self, data):
        if isinstance(data, str):
            data = data.strip().upper()
        return super().to_internal_value(data)


class BirthDateField(serializers.DateField):
    """A date, or an ISO datetime truncated to its date."""

    def to_internal_value(self, value):
        if isinstance(value, datetime.datetime):
            value = value.date()
        elif isinstance(value, str) and 'T' in value:
            try:
                parsed = parse_datetime(value.strip())
            except ValueError:
                parsed = None
            if parsed is not None:
                value = parsed.date()
        return super().to_internal_value(value)


class MedicationSerializer(serializers.Serializer):
    name = TextField(error_messages=_required('Medication name'))
    dosage = _optional_text()
    frequency = _optional_text()


class EmergencyContactSerializer(serializers.Serializer):
    name = TextField(error_messages=_required('Contact name'))
    phone = TextField(error_messages=_required('Contact phone'))
    relationship = TextField(error_messages=_required('Relationship'))


class PhysicianSerializer(serializers.Serializer):
    name = TextField(error_messages=_required('Physician name'))
    phone = TextField(error_messages=_required('Physician phone'))
    specialty = _optional_text()


class InsuranceSerializer(serializers.Serializer):
    provider = TextField(error_messages=_required('Insurance provider'))
    memberId = TextField(error_messages=_required('Insurance member ID'))
    groupNumber = _optional_text()


class EmployeeSerializer(serializers.Serializer):
    """A complete employee record in its API shape (camelCase keys)."""
    employeeId = StringField(error_messages=_required('Employee ID'))
    name = TextField(error_messages=_required('Name'))
    dateOfBirth = BirthDateField(error_messages={
        **_required('A valid date of birth'),
        'invalid': 'A valid date of birth is required',
    })
    bloodGroup = BloodGroupField(choices=BLOOD_GROUPS, error_messages={
        **_required('Valid blood group'),
        'invalid_choice': 'Valid blood group is required',
    })
    allergies = serializers.ListField(child=TextField(allow_blank=True), required=False, allow_null=True,
                                      default=list)
    medications = MedicationSerializer(many=True, required=False, allow_null=True, default=list)
    emergencyContacts = EmergencyContactSerializer(many=True, error_messages=_required('At least one emergency contact'))
    physician = PhysicianSerializer(error_messages=_required('Physician details'))
    insurance = InsuranceSerializer(error_messages=_required('Insurance details'))
    medicalConditions = serializers.ListField(child=TextField(allow_blank=True), required=False, allow_null=True,
                                      default=list)
    notes = TextField(required=False, allow_blank=True, default='', max_length=NOTES_MAX_LENGTH,
                      error_messages={'max_length': f'Notes cannot exceed {NOTES_MAX_LENGTH} characters'})

    def validate_employeeId(self, v):
        return v.upper()

    def validate_dateOfBirth(self, v):
        if v > timezone.localdate():
            raise serializers.ValidationError('Date of birth cannot be in the future')
        return v

    def validate_allergies(self, v):
        return [item for item in (v or []) if item]

    def validate_medicalConditions(self, v):
        return [item for item in (v or []) if item]

    def validate_medications(self, v):
        return [dict(item) for item in (v or [])]

    def validate_emergencyContacts(self, v):
        if not v:
            raise serializers.ValidationError('At least one emergency contact is required')
        return [dict(item) for item in v]

    def validate_physician(self, v):
        return dict(v)

    def validate_insurance(self, v):
        return dict(v)
