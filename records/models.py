"""
Database models for the emergency medical QR backend.

``EmployeeRecord`` is the only domain entity.  Nested parts of a medical
profile (medications, emergency contacts, physician, insurance) have no
identity of their own, so they are stored as JSON alongside the record
rather than as child tables.  ``User`` and ``AuditEvent`` back the
administrator login and the audit trail.
"""
from __future__ import annotations

import uuid
from datetime import date

from django.contrib.auth.models import AbstractUser
from django.db import models
from django.utils import timezone

BLOOD_GROUPS = ('A+', 'A-', 'B+', 'B-', 'AB+', 'AB-', 'O+', 'O-')
NOTES_MAX_LENGTH = 500


def age_on(date_of_birth: date, today: date | None = None) -> int:
    """Whole years between ``date_of_birth`` and ``today``.

    One year is subtracted while this year's birthday has not been
    reached yet.
    """
    today = today or timezone.localdate()
    years = today.year - date_of_birth.year
    if (today.month, today.day) < (date_of_birth.month, date_of_birth.day):
        years -= 1
    return years


class User(AbstractUser):
    """Administrator account.

    The role is an identity claim displayed in login payloads and audit
    events; any authenticated account may manage any record.
    """
    ROLE_CHOICES = [
        ('admin', 'Administrator'),
        ('staff', 'Staff'),
    ]
    role = models.CharField(max_length=10, choices=ROLE_CHOICES, default='admin')

    def __str__(self) -> str:
        return f"{self.username} ({self.role})"


class EmployeeRecord(models.Model):
    """An employee's emergency medical profile."""
    BLOOD_GROUP_CHOICES = [(g, g) for g in BLOOD_GROUPS]

    # Assigned by the store before the first write so that the lookup URL
    # can be derived from it in the same insert.
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    employee_id = models.CharField(max_length=64, unique=True)
    name = models.CharField(max_length=255)
    date_of_birth = models.DateField()
    blood_group = models.CharField(max_length=3, choices=BLOOD_GROUP_CHOICES)
    allergies = models.JSONField(default=list, blank=True)
    medications = models.JSONField(default=list, blank=True)
    emergency_contacts = models.JSONField(default=list)
    physician = models.JSONField(default=dict)
    insurance = models.JSONField(default=dict)
    medical_conditions = models.JSONField(default=list, blank=True)
    notes = models.TextField(max_length=NOTES_MAX_LENGTH, blank=True)
    lookup_url = models.CharField(max_length=512, editable=False)
    created_by = models.ForeignKey(
        User, null=True, blank=True, on_delete=models.SET_NULL, related_name='records_created'
    )
    updated_by = models.ForeignKey(
        User, null=True, blank=True, on_delete=models.SET_NULL, related_name='records_updated'
    )
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']

    @property
    def age(self) -> int:
        return age_on(self.date_of_birth)

    def __str__(self) -> str:
        return f"{self.employee_id} {self.name}"


class AuditEvent(models.Model):
    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True)
    action = models.CharField(max_length=64)
    object_type = models.CharField(max_length=64, blank=True, null=True)
    object_id = models.CharField(max_length=64, blank=True, null=True)
    detail = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=['action', 'created_at'], name='records_audit_action_idx'),
            models.Index(fields=['object_type', 'object_id', 'created_at'], name='records_audit_object_idx'),
        ]

    def __str__(self) -> str:
        return f"{self.action}:{self.object_type}:{self.object_id}"
