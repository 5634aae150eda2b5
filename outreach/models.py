"""
Database models for the outreach backend.

Organizations are the tenant boundary: every patient link, campaign, run,
row and call belongs to exactly one organization.  Identifiers are UUIDs so
they can be handed to the front-end and the call provider unchanged.
"""
from __future__ import annotations

import uuid

from django.contrib.auth.models import AbstractUser
from django.db import models


class TimestampedModel(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class Organization(TimestampedModel):
    """A tenant.  ``external_id`` is the organization id at the auth provider."""
    external_id = models.CharField(max_length=256, unique=True)
    name = models.CharField(max_length=256)
    phone = models.CharField(max_length=20, blank=True)
    timezone = models.CharField(max_length=50, default='America/New_York')
    # {"monday": {"start": "09:00", "end": "17:00"}, ..., "sunday": null}
    office_hours = models.JSONField(null=True, blank=True)
    concurrent_call_limit = models.PositiveIntegerField(default=20)
    is_super_admin = models.BooleanField(default=False)

    def __str__(self) -> str:
        return self.name


class User(AbstractUser):
    """Custom user model with a role and an optional organization binding."""
    ROLE_MEMBER = 'member'
    ROLE_ADMIN = 'admin'
    ROLE_SUPERADMIN = 'superadmin'
    ROLE_CHOICES = [
        (ROLE_MEMBER, 'Member'),
        (ROLE_ADMIN, 'Administrator'),
        (ROLE_SUPERADMIN, 'Super Administrator'),
    ]
    external_id = models.CharField(max_length=256, blank=True, db_index=True)
    role = models.CharField(max_length=50, choices=ROLE_CHOICES, default=ROLE_MEMBER)
    organization = models.ForeignKey(
        Organization, null=True, blank=True, on_delete=models.CASCADE, related_name='users'
    )

    def __str__(self) -> str:
        return f"{self.username} ({self.role})"


class Patient(TimestampedModel):
    """A person shared across organizations, deduplicated by ``patient_hash``."""
    patient_hash = models.CharField(max_length=256, unique=True)
    first_name = models.CharField(max_length=256, blank=True)
    last_name = models.CharField(max_length=256, blank=True)
    dob = models.DateField(null=True, blank=True)
    is_minor = models.BooleanField(default=False)
    primary_phone = models.CharField(max_length=20, blank=True, db_index=True)
    secondary_phone = models.CharField(max_length=20, blank=True)
    external_ids = models.JSONField(default=dict, blank=True)
    metadata = models.JSONField(default=dict, blank=True)

    def __str__(self) -> str:
        return f"{self.first_name} {self.last_name}".strip() or str(self.id)


class OrganizationPatient(models.Model):
    """Links a patient to an organization together with the org's EMR id."""
    organization = models.ForeignKey(Organization, on_delete=models.CASCADE, related_name='patient_links')
    patient = models.ForeignKey(Patient, on_delete=models.CASCADE, related_name='organization_links')
    emr_id_in_org = models.CharField(max_length=256, blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        unique_together = [('organization', 'patient')]

    def __str__(self) -> str:
        return f"{self.patient_id} in {self.organization_id}"


class CampaignTemplate(TimestampedModel):
    name = models.CharField(max_length=256)
    description = models.TextField(blank=True)
    agent_id = models.CharField(max_length=256, db_index=True)
    llm_id = models.CharField(max_length=256, db_index=True)
    base_prompt = models.TextField()
    voicemail_message = models.TextField(blank=True)
    variables_config = models.JSONField(default=dict)
    analysis_config = models.JSONField(default=dict)
    created_by = models.ForeignKey(
        User, null=True, blank=True, on_delete=models.SET_NULL, related_name='campaign_templates'
    )

    def __str__(self) -> str:
        return self.name


class Campaign(TimestampedModel):
    DIRECTION_INBOUND = 'inbound'
    DIRECTION_OUTBOUND = 'outbound'
    DIRECTION_CHOICES = [
        (DIRECTION_INBOUND, 'Inbound'),
        (DIRECTION_OUTBOUND, 'Outbound'),
    ]
    organization = models.ForeignKey(Organization, on_delete=models.CASCADE, related_name='campaigns')
    template = models.ForeignKey(
        CampaignTemplate, null=True, on_delete=models.SET_NULL, related_name='campaigns'
    )
    name = models.CharField(max_length=256)
    direction = models.CharField(max_length=10, choices=DIRECTION_CHOICES)
    is_active = models.BooleanField(default=True)
    is_default_inbound = models.BooleanField(default=False)
    metadata = models.JSONField(default=dict, blank=True)

    def __str__(self) -> str:
        return self.name


class CampaignRequest(TimestampedModel):
    STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('approved', 'Approved'),
        ('in_progress', 'In progress'),
        ('rejected', 'Rejected'),
        ('completed', 'Completed'),
    ]
    organization = models.ForeignKey(Organization, on_delete=models.CASCADE, related_name='campaign_requests')
    requested_by = models.ForeignKey(
        User, null=True, blank=True, on_delete=models.SET_NULL, related_name='campaign_requests'
    )
    name = models.CharField(max_length=256)
    direction = models.CharField(max_length=10, choices=Campaign.DIRECTION_CHOICES, default='outbound')
    description = models.TextField()
    main_goal = models.TextField(blank=True)
    desired_analysis = models.JSONField(default=list, blank=True)
    example_sheets = models.JSONField(default=list, blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='pending', db_index=True)
    admin_notes = models.TextField(blank=True)
    resulting_campaign = models.ForeignKey(
        Campaign, null=True, blank=True, on_delete=models.SET_NULL, related_name='requests'
    )

    def __str__(self) -> str:
        return f"{self.name} ({self.status})"


class Run(TimestampedModel):
    """One execution of a campaign over an uploaded patient list."""
    STATUS_CHOICES = [
        ('draft', 'Draft'),
        ('processing', 'Processing'),
        ('ready', 'Ready'),
        ('running', 'Running'),
        ('paused', 'Paused'),
        ('completed', 'Completed'),
        ('failed', 'Failed'),
        ('scheduled', 'Scheduled'),
    ]
    STARTABLE_STATUSES = ('draft', 'ready', 'paused', 'scheduled')
    ACTIVE_STATUSES = ('running', 'paused', 'scheduled')

    campaign = models.ForeignKey(Campaign, on_delete=models.CASCADE, related_name='runs')
    organization = models.ForeignKey(Organization, on_delete=models.CASCADE, related_name='runs')
    name = models.CharField(max_length=256)
    custom_prompt = models.TextField(blank=True)
    custom_voicemail_message = models.TextField(blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='draft', db_index=True)
    metadata = models.JSONField(default=dict, blank=True)
    scheduled_at = models.DateTimeField(null=True, blank=True)

    def __str__(self) -> str:
        return f"{self.name} ({self.status})"


class Row(TimestampedModel):
    """A single patient entry inside a run."""
    STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('calling', 'Calling'),
        ('completed', 'Completed'),
        ('failed', 'Failed'),
        ('skipped', 'Skipped'),
    ]
    run = models.ForeignKey(Run, on_delete=models.CASCADE, related_name='rows')
    organization = models.ForeignKey(Organization, on_delete=models.CASCADE, related_name='rows')
    patient = models.ForeignKey(Patient, null=True, blank=True, on_delete=models.SET_NULL, related_name='rows')
    variables = models.JSONField(default=dict)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='pending', db_index=True)
    error = models.TextField(blank=True)
    sort_index = models.PositiveIntegerField()
    retry_count = models.PositiveIntegerField(default=0)
    metadata = models.JSONField(default=dict, blank=True)

    class Meta:
        ordering = ['sort_index']


class Call(TimestampedModel):
    STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('in-progress', 'In progress'),
        ('completed', 'Completed'),
        ('failed', 'Failed'),
        ('voicemail', 'Voicemail'),
        ('no-answer', 'No answer'),
    ]
    organization = models.ForeignKey(Organization, on_delete=models.CASCADE, related_name='calls')
    run = models.ForeignKey(Run, null=True, blank=True, on_delete=models.SET_NULL, related_name='calls')
    campaign = models.ForeignKey(Campaign, null=True, blank=True, on_delete=models.SET_NULL, related_name='calls')
    row = models.ForeignKey(Row, null=True, blank=True, on_delete=models.SET_NULL, related_name='calls')
    patient = models.ForeignKey(Patient, null=True, blank=True, on_delete=models.SET_NULL, related_name='calls')
    agent_id = models.CharField(max_length=256)
    direction = models.CharField(max_length=10, choices=Campaign.DIRECTION_CHOICES, db_index=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='pending', db_index=True)
    to_number = models.CharField(max_length=20)
    from_number = models.CharField(max_length=20)
    transcript = models.TextField(blank=True)
    analysis = models.JSONField(default=dict, blank=True)
    duration = models.PositiveIntegerField(null=True, blank=True)
    error = models.TextField(blank=True)
    metadata = models.JSONField(default=dict, blank=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self) -> str:
        return f"{self.direction} call to {self.to_number} ({self.status})"


class AuditEvent(models.Model):
    user = models.ForeignKey(User, null=True, blank=True, on_delete=models.SET_NULL, related_name='audit_events')
    action = models.CharField(max_length=64)
    object_type = models.CharField(max_length=64, blank=True)
    object_id = models.CharField(max_length=64, blank=True)
    detail = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [models.Index(fields=['action', 'created_at'])]
