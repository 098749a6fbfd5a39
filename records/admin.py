"""
Django admin registrations for the records models.

Records are normally managed through the REST API; the admin site is a
development aid for inspecting data.  The lookup URL is shown read-only
because it must never change after creation.
"""

from django.contrib import admin

from .models import User, EmployeeRecord, AuditEvent


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = ('username', 'email', 'role', 'is_staff', 'is_superuser')
    list_filter = ('role',)
    search_fields = ('username', 'email', 'first_name', 'last_name')


@admin.register(EmployeeRecord)
class EmployeeRecordAdmin(admin.ModelAdmin):
    list_display = ('employee_id', 'name', 'blood_group', 'date_of_birth', 'created_at')
    list_filter = ('blood_group',)
    search_fields = ('employee_id', 'name')
    readonly_fields = ('id', 'lookup_url', 'created_at', 'updated_at', 'created_by', 'updated_by')


@admin.register(AuditEvent)
class AuditEventAdmin(admin.ModelAdmin):
    list_display = ('action', 'object_type', 'object_id', 'user', 'created_at')
    list_filter = ('action', 'object_type')
    search_fields = ('object_id', 'user__username')
