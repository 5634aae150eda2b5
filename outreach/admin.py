"""
Django admin registrations for the outreach models.

Lets staff inspect tenants, patients, campaigns and call history at
``/admin/`` during development and support.
"""

from django.contrib import admin

from .models import (
    AuditEvent,
    Call,
    Campaign,
    CampaignRequest,
    CampaignTemplate,
    Organization,
    OrganizationPatient,
    Patient,
    Row,
    Run,
    User,
)


@admin.register(Organization)
class OrganizationAdmin(admin.ModelAdmin):
    list_display = ('name', 'external_id', 'timezone', 'concurrent_call_limit', 'is_super_admin', 'created_at')
    list_filter = ('is_super_admin',)
    search_fields = ('name', 'external_id', 'phone')


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = ('username', 'email', 'role', 'organization', 'is_staff', 'is_superuser')
    list_filter = ('role', 'organization')
    search_fields = ('username', 'email', 'external_id')


@admin.register(Patient)
class PatientAdmin(admin.ModelAdmin):
    list_display = ('id', 'first_name', 'last_name', 'dob', 'is_minor', 'primary_phone')
    search_fields = ('first_name', 'last_name', 'primary_phone', 'patient_hash')


@admin.register(OrganizationPatient)
class OrganizationPatientAdmin(admin.ModelAdmin):
    list_display = ('organization', 'patient', 'emr_id_in_org', 'is_active')
    list_filter = ('is_active', 'organization')


@admin.register(CampaignTemplate)
class CampaignTemplateAdmin(admin.ModelAdmin):
    list_display = ('name', 'agent_id', 'llm_id', 'created_at')
    search_fields = ('name', 'agent_id')


@admin.register(Campaign)
class CampaignAdmin(admin.ModelAdmin):
    list_display = ('name', 'organization', 'direction', 'is_active', 'created_at')
    list_filter = ('direction', 'is_active')
    search_fields = ('name',)


@admin.register(CampaignRequest)
class CampaignRequestAdmin(admin.ModelAdmin):
    list_display = ('name', 'organization', 'status', 'requested_by', 'created_at')
    list_filter = ('status',)


@admin.register(Run)
class RunAdmin(admin.ModelAdmin):
    list_display = ('name', 'campaign', 'organization', 'status', 'scheduled_at', 'created_at')
    list_filter = ('status',)


@admin.register(Row)
class RowAdmin(admin.ModelAdmin):
    list_display = ('run', 'sort_index', 'status', 'retry_count')
    list_filter = ('status',)


@admin.register(Call)
class CallAdmin(admin.ModelAdmin):
    list_display = ('id', 'organization', 'direction', 'status', 'to_number', 'duration', 'created_at')
    list_filter = ('status', 'direction')
    search_fields = ('to_number', 'from_number')


@admin.register(AuditEvent)
class AuditEventAdmin(admin.ModelAdmin):
    list_display = ('action', 'user', 'object_type', 'object_id', 'created_at')
    list_filter = ('action',)
