from outreach.auth import AuthContext, require_org
from outreach.serializers.patients import PatientCreateSerializer, PatientListQuerySerializer
from outreach.services import audit
from outreach.services import patients as patient_service
from outreach.services.views_cache import revalidate_path

from .base import unwrap, unwrap_or_none, validate

PATIENT_FIELDS = {
    'firstName': 'first_name',
    'lastName': 'last_name',
    'dob': 'dob',
    'primaryPhone': 'primary_phone',
    'secondaryPhone': 'secondary_phone',
    'emrIdInOrg': 'emr_id_in_org',
}


def normalize_patient_input(validated):
    # absent fields become "" (the service treats "" as "unknown")
    return {attr: validated.get(key) or '' for key, attr in PATIENT_FIELDS.items()}


def create_patient(ctx: AuthContext, data):
    ctx = require_org(ctx)
    validated = validate(PatientCreateSerializer, data)
    result = patient_service.create(**normalize_patient_input(validated), org_id=ctx.org_id)
    patient = unwrap(result)
    audit.log_action(user_id=ctx.user_id, action='patient.create', object_type='patient',
                     object_id=patient.get('id'), detail={'orgId': ctx.org_id})
    revalidate_path('/patients')
    return patient


def get_patients(ctx: AuthContext, params=None):
    ctx = require_org(ctx)
    validated = validate(PatientListQuerySerializer, params)
    return unwrap(patient_service.get_all(ctx.org_id, **validated))


def get_patient(ctx: AuthContext, patient_id):
    ctx = require_org(ctx)
    return unwrap_or_none(patient_service.get_by_id(ctx.org_id, patient_id))
