import hashlib
import logging
import re
from datetime import date
from typing import Any, Dict, Optional

from django.db import transaction
from django.db.models import Q
from django.utils import timezone
from django.utils.dateparse import parse_date

from outreach.models import OrganizationPatient, Patient
from outreach.results import NOT_FOUND, ServiceResult, create_error, create_success, handle_service_error

logger = logging.getLogger(__name__)

MINOR_AGE = 18


def _digits(phone: str) -> str:
    return re.sub(r'\D', '', phone or '')


def has_shared_identity(dob: str, phone: str) -> bool:
    """True when a dob or phone digits are present, so the hash may match across organizations."""
    return bool((dob or '').strip() or _digits(phone))


def generate_patient_hash(first_name: str, last_name: str, dob: str, phone: str, scope: str = '') -> str:
    """Stable identity hash used to deduplicate patients.

    Without a dob or phone the name alone identifies nobody, so callers pass
    the organization as ``scope`` and the match stays inside that tenant.
    """
    parts = [
        (first_name or '').strip().lower(),
        (last_name or '').strip().lower(),
        (dob or '').strip(),
        _digits(phone),
    ]
    if scope:
        parts.append(f'org:{scope}')
    key = '|'.join(parts)
    return hashlib.sha256(key.encode('utf-8')).hexdigest()


def is_minor(dob: Optional[date], today: Optional[date] = None) -> bool:
    if dob is None:
        return False
    today = today or timezone.localdate()
    try:
        cutoff = today.replace(year=today.year - MINOR_AGE)
    except ValueError:
        # Feb 29
        cutoff = today.replace(year=today.year - MINOR_AGE, day=28)
    return dob > cutoff


def format_patient(patient: Patient, link: Optional[OrganizationPatient] = None) -> Dict[str, Any]:
    data = {
        'id': str(patient.id),
        'patientHash': patient.patient_hash,
        'firstName': patient.first_name,
        'lastName': patient.last_name,
        'dob': patient.dob.isoformat() if patient.dob else None,
        'isMinor': patient.is_minor,
        'primaryPhone': patient.primary_phone,
        'secondaryPhone': patient.secondary_phone,
        'createdAt': patient.created_at.isoformat(),
        'updatedAt': patient.updated_at.isoformat(),
    }
    if link is not None:
        data['emrIdInOrg'] = link.emr_id_in_org
        data['isActive'] = link.is_active
    return data


def get_all(org_id: str, *, limit: int = 50, offset: int = 0, search: str = '') -> ServiceResult:
    try:
        links = (OrganizationPatient.objects
                 .filter(organization_id=org_id, is_active=True)
                 .select_related('patient'))
        if search:
            links = links.filter(
                Q(patient__first_name__icontains=search)
                | Q(patient__last_name__icontains=search)
                | Q(patient__primary_phone__icontains=search)
                | Q(emr_id_in_org__icontains=search)
            )
        total = links.count()
        page = links.order_by('patient__last_name', 'patient__first_name')[offset:offset + limit]
        return create_success({
            'patients': [format_patient(link.patient, link) for link in page],
            'totalCount': total,
            'hasMore': offset + limit < total,
        })
    except Exception as e:
        return handle_service_error(e, 'Failed to fetch patients')


def get_by_id(org_id: str, patient_id: str) -> ServiceResult:
    try:
        link = (OrganizationPatient.objects
                .filter(organization_id=org_id, patient_id=patient_id)
                .select_related('patient')
                .first())
        if link is None:
            return create_error(NOT_FOUND, 'Patient not found')
        return create_success(format_patient(link.patient, link))
    except Exception as e:
        return handle_service_error(e, 'Failed to fetch patient')


def create(*, first_name: str, last_name: str, dob: str, primary_phone: str,
           secondary_phone: str, emr_id_in_org: str, org_id: str) -> ServiceResult:
    """Create a patient in ``org_id`` or link the existing one with the same hash.

    Empty strings are accepted for every field; an empty ``dob`` is stored as NULL.
    """
    try:
        dob_value = parse_date(dob) if dob else None
        scope = '' if has_shared_identity(dob, primary_phone) else str(org_id)
        patient_hash = generate_patient_hash(first_name, last_name, dob, primary_phone, scope)
        with transaction.atomic():
            patient = Patient.objects.select_for_update().filter(patient_hash=patient_hash).first()
            if patient is None:
                patient = Patient.objects.create(
                    patient_hash=patient_hash,
                    first_name=first_name,
                    last_name=last_name,
                    dob=dob_value,
                    is_minor=is_minor(dob_value),
                    primary_phone=primary_phone,
                    secondary_phone=secondary_phone,
                )
                created = True
            else:
                patient.first_name = first_name or patient.first_name
                patient.last_name = last_name or patient.last_name
                patient.primary_phone = primary_phone or patient.primary_phone
                patient.secondary_phone = secondary_phone or patient.secondary_phone
                patient.save(update_fields=['first_name', 'last_name', 'primary_phone',
                                            'secondary_phone', 'updated_at'])
                created = False
            link, _ = OrganizationPatient.objects.update_or_create(
                organization_id=org_id,
                patient=patient,
                defaults={'emr_id_in_org': emr_id_in_org, 'is_active': True},
            )
        logger.info('patient %s %s in org %s', patient.id, 'created' if created else 'linked', org_id)
        data = format_patient(patient, link)
        data['created'] = created
        return create_success(data)
    except Exception as e:
        return handle_service_error(e, 'Failed to create patient')
