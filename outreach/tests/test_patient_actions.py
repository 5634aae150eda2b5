import uuid

import pytest

from outreach.actions import patients as patient_actions
from outreach.auth import ANONYMOUS, auth_context_for_user
from outreach.exceptions import ActionError, NoOrganization, Unauthenticated, ValidationFailed
from outreach.models import OrganizationPatient, Patient
from outreach.results import INTERNAL_ERROR, NOT_FOUND, create_error, create_success
from outreach.services import patients as patient_service

pytestmark = pytest.mark.django_db


@pytest.fixture
def service_calls(monkeypatch):
    calls = []

    def fake_create(**kwargs):
        calls.append(kwargs)
        return create_success({'id': 'p1', **kwargs})

    monkeypatch.setattr(patient_service, 'create', fake_create)
    return calls


@pytest.fixture
def revalidated(monkeypatch):
    paths = []
    monkeypatch.setattr(patient_actions, 'revalidate_path', lambda *p: paths.extend(p))
    return paths


def test_create_patient_uses_session_org(member_ctx, service_calls, revalidated):
    patient_actions.create_patient(member_ctx, {'orgId': str(uuid.uuid4()), 'firstName': 'A'})
    assert len(service_calls) == 1
    assert service_calls[0]['org_id'] == member_ctx.org_id


def test_missing_fields_become_empty_strings(member_ctx, service_calls, revalidated):
    patient_actions.create_patient(member_ctx, {})
    kwargs = service_calls[0]
    for field in ('first_name', 'last_name', 'primary_phone', 'dob', 'secondary_phone', 'emr_id_in_org'):
        assert kwargs[field] == ''


def test_create_patient_invalidates_patients_view(member_ctx, service_calls, revalidated):
    data = patient_actions.create_patient(member_ctx, {'firstName': 'Ann', 'dob': '1990-02-03'})
    assert revalidated == ['/patients']
    assert data['first_name'] == 'Ann'
    assert service_calls[0]['dob'] == '1990-02-03'


def test_dob_datetime_is_normalized_to_date(member_ctx, service_calls, revalidated):
    patient_actions.create_patient(member_ctx, {'dob': '1990-02-03T10:00:00Z'})
    assert service_calls[0]['dob'] == '1990-02-03'


def test_invalid_dob_is_a_validation_error(member_ctx, service_calls, revalidated):
    with pytest.raises(ValidationFailed) as exc:
        patient_actions.create_patient(member_ctx, {'dob': 'yesterday'})
    assert 'dob' in exc.value.detail
    assert service_calls == [] and revalidated == []


@pytest.mark.parametrize('dob', ['2020-02-30', '1990-13-01', '2020-02-30T10:00:00'])
def test_impossible_dob_is_a_validation_error(member_ctx, service_calls, revalidated, dob):
    with pytest.raises(ValidationFailed) as exc:
        patient_actions.create_patient(member_ctx, {'dob': dob})
    assert exc.value.detail['dob'] == ['Invalid date format']
    assert service_calls == []


def test_short_primary_phone_is_rejected(member_ctx, service_calls, revalidated):
    with pytest.raises(ValidationFailed):
        patient_actions.create_patient(member_ctx, {'primaryPhone': '123'})
    assert service_calls == []


def test_service_error_message_is_passed_through(member_ctx, monkeypatch, revalidated):
    monkeypatch.setattr(patient_service, 'create', lambda **kw: create_error(INTERNAL_ERROR, 'X'))
    with pytest.raises(ActionError) as exc:
        patient_actions.create_patient(member_ctx, {'firstName': 'A'})
    assert str(exc.value) == 'X'
    assert revalidated == []


def test_auth_runs_before_validation(loner, service_calls):
    with pytest.raises(Unauthenticated):
        patient_actions.create_patient(ANONYMOUS, {'dob': 'garbage'})
    with pytest.raises(NoOrganization):
        patient_actions.create_patient(auth_context_for_user(loner), {'dob': 'garbage'})
    assert service_calls == []


def test_create_patient_persists_under_session_org(member_ctx, org, other_org, revalidated):
    data = patient_actions.create_patient(member_ctx, {
        'orgId': str(other_org.id), 'firstName': 'A', 'lastName': 'B', 'primaryPhone': '(555) 111-2222',
    })
    link = OrganizationPatient.objects.get(patient_id=data['id'])
    assert link.organization_id == org.id
    assert not OrganizationPatient.objects.filter(organization=other_org).exists()


def test_get_patient_returns_none_when_missing(member_ctx, monkeypatch):
    monkeypatch.setattr(patient_service, 'get_by_id', lambda org_id, pid: create_error(NOT_FOUND, 'Patient not found'))
    assert patient_actions.get_patient(member_ctx, str(uuid.uuid4())) is None


def test_get_patients_is_scoped_to_org(member_ctx, org, other_org):
    mine = Patient.objects.create(patient_hash='h1', first_name='Mine', last_name='Z')
    theirs = Patient.objects.create(patient_hash='h2', first_name='Theirs', last_name='Z')
    OrganizationPatient.objects.create(organization=org, patient=mine)
    OrganizationPatient.objects.create(organization=other_org, patient=theirs)
    data = patient_actions.get_patients(member_ctx, {'limit': 10})
    assert [p['firstName'] for p in data['patients']] == ['Mine']
    assert data['totalCount'] == 1 and data['hasMore'] is False
