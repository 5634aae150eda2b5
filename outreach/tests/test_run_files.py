import base64
import uuid
from datetime import date

import pytest

from outreach.actions import calls as call_actions
from outreach.actions import runs as run_actions
from outreach.exceptions import ActionError, ValidationFailed
from outreach.models import AuditEvent, Call, Campaign, CampaignTemplate, OrganizationPatient, Patient, Row, Run
from outreach.services import run_files
from outreach.services import runs as run_service
from outreach.services import views_cache

pytestmark = pytest.mark.django_db

PATIENTS_CSV = (
    'First Name,Last Name,DOB,Phone,MRN,Appointment\n'
    'Ann,Lee,1980-05-01,(555) 222-3333,A1,Monday\n'
    'Bob,Ray,03/04/85,1-555-444-5555,B2,Tuesday\n'
    'Cy,Nope,1990-01-01,12,C3,Friday\n'
)


@pytest.fixture
def campaign(org):
    return Campaign.objects.create(organization=org, name='Recall', direction='outbound')


@pytest.fixture
def run(campaign, org):
    return Run.objects.create(campaign=campaign, organization=org, name='March')


@pytest.fixture
def published(monkeypatch):
    events = []
    monkeypatch.setattr(run_service, 'publish', lambda group, event: events.append((group, event)) or True)
    return events


@pytest.fixture
def quiet_publish(monkeypatch):
    monkeypatch.setattr(views_cache, 'publish', lambda group, event: True)


@pytest.fixture
def revalidated(monkeypatch):
    paths = []
    monkeypatch.setattr(run_actions, 'revalidate_path', lambda *p: paths.extend(p))
    monkeypatch.setattr(call_actions, 'revalidate_path', lambda *p: paths.extend(p))
    return paths


def _upload(ctx, run, content=PATIENTS_CSV, name='patients.csv'):
    return run_actions.upload_run_file(ctx, {'runId': str(run.id), 'fileName': name, 'fileContent': content})


def test_parse_csv_sniffs_delimiter():
    headers, records = run_files.parse_csv('Phone;Name\n5552223333;Ann\n\n')
    assert headers == ['Phone', 'Name']
    assert records == [{'Phone': '5552223333', 'Name': 'Ann'}]


def test_parse_csv_without_data_lines():
    with pytest.raises(ValueError, match='No data found'):
        run_files.parse_csv('Phone,Name\n')


def test_map_columns_matches_header_variants():
    mapping = run_files.map_columns(['Patient First Name', 'SURNAME', 'Date of Birth', 'Cell Phone', 'Notes'])
    assert mapping == {
        'firstName': 'Patient First Name',
        'lastName': 'SURNAME',
        'dob': 'Date of Birth',
        'primaryPhone': 'Cell Phone',
    }


@pytest.mark.parametrize('value,expected', [
    ('(555) 222-3333', '5552223333'),
    ('+1 555 222 3333', '5552223333'),
    ('222-3333', ''),
    ('', ''),
])
def test_normalize_phone(value, expected):
    assert run_files.normalize_phone(value) == expected


def test_normalize_dob_formats():
    assert run_files.normalize_dob('1980-05-01') == '1980-05-01'
    assert run_files.normalize_dob('05/01/1980') == '1980-05-01'
    assert run_files.normalize_dob('03/04/85') == '1985-03-04'
    assert run_files.normalize_dob('02/30/1980') is None
    assert run_files.normalize_dob(f'01/01/{date.today().year + 1}') is None
    assert run_files.normalize_dob('soon') is None


def test_validation_rules_default_to_phone_only():
    assert run_files.validation_rules({}) == {
        'requireValidPhone': True, 'requireValidDOB': False, 'requireName': False,
    }
    rules = run_files.validation_rules({'variables': {'patient': {'validation': {'requireValidDOB': True}}}})
    assert rules['requireValidDOB'] is True


def test_upload_creates_patients_and_rows(member_ctx, org, run, published, revalidated):
    result = _upload(member_ctx, run)

    assert result['totalRows'] == 3
    assert result['rowsAdded'] == 2
    assert result['invalidRows'] == 1
    assert result['errors'] == [{'line': 4, 'errors': ['Missing or invalid phone number']}]
    assert result['columnMappings']['primaryPhone'] == 'Phone'
    assert result['run']['status'] == 'ready'

    run.refresh_from_db()
    assert run.status == 'ready'
    assert run.metadata['rows'] == {'total': 2, 'invalid': 1}

    rows = list(Row.objects.filter(run=run).order_by('sort_index'))
    assert [r.sort_index for r in rows] == [0, 1]
    assert all(r.status == 'pending' for r in rows)
    assert rows[0].variables['Appointment'] == 'Monday'
    assert rows[0].variables['primaryPhone'] == '5552223333'
    assert rows[1].variables['dob'] == '1985-03-04'
    assert rows[0].metadata['hasRequiredCampaignFields'] is True

    bob = Patient.objects.get(primary_phone='5554445555')
    assert bob.dob == date(1985, 3, 4)
    link = OrganizationPatient.objects.get(organization=org, patient=bob)
    assert link.emr_id_in_org == 'B2'
    assert rows[1].patient_id == bob.id

    assert published[-1][0] == f'org-{org.id}'
    assert published[-1][1]['status'] == 'ready'
    assert revalidated == [f'/campaigns/{run.campaign_id}/runs/{run.id}', '/patients', '/']
    assert AuditEvent.objects.filter(action='run.upload', object_id=str(run.id)).exists()


def test_second_upload_appends_rows_and_counts(member_ctx, run, published, revalidated):
    _upload(member_ctx, run)
    _upload(member_ctx, run, 'phone,first name\n5550001111,Dee\n')

    run.refresh_from_db()
    assert run.metadata['rows'] == {'total': 3, 'invalid': 1}
    assert list(Row.objects.filter(run=run).order_by('sort_index').values_list('sort_index', flat=True)) == [0, 1, 2]


def test_reupload_links_existing_patient(member_ctx, run, published, revalidated):
    _upload(member_ctx, run)
    _upload(member_ctx, run)
    assert Patient.objects.count() == 2
    assert Row.objects.filter(run=run).count() == 4


def test_upload_accepts_base64_data_url(member_ctx, run, published, revalidated):
    encoded = base64.b64encode(PATIENTS_CSV.encode()).decode()
    result = _upload(member_ctx, run, f'data:text/csv;base64,{encoded}')
    assert result['rowsAdded'] == 2


def test_upload_reports_missing_campaign_fields(member_ctx, org, published, revalidated):
    template = CampaignTemplate.objects.create(
        name='Recall', agent_id='agent_1', llm_id='llm_1', base_prompt='Hi',
        variables_config={'campaign': {'fields': [{'key': 'appointmentDate', 'required': True}]}},
    )
    campaign = Campaign.objects.create(organization=org, template=template, name='Recall', direction='outbound')
    run = Run.objects.create(campaign=campaign, organization=org, name='R')

    _upload(member_ctx, run)

    row = Row.objects.filter(run=run).first()
    assert row.metadata['hasRequiredCampaignFields'] is False
    assert row.metadata['missingCampaignFields'] == ['appointmentDate']


def test_upload_without_phone_column_fails(member_ctx, run, published, revalidated):
    with pytest.raises(ActionError) as exc:
        _upload(member_ctx, run, 'First Name,Last Name\nAnn,Lee\n')
    assert str(exc.value) == 'Missing required column: phone'
    assert Row.objects.count() == 0
    assert revalidated == []


def test_upload_to_running_run_is_rejected(member_ctx, run, published, revalidated):
    run.status = 'running'
    run.save()
    with pytest.raises(ActionError) as exc:
        _upload(member_ctx, run)
    assert str(exc.value) == 'Rows cannot be added to a run in running status'
    assert Patient.objects.count() == 0


def test_upload_to_foreign_run_is_not_found(member_ctx, other_org, revalidated):
    foreign_campaign = Campaign.objects.create(organization=other_org, name='Theirs', direction='outbound')
    foreign = Run.objects.create(campaign=foreign_campaign, organization=other_org, name='R')
    with pytest.raises(ActionError) as exc:
        _upload(member_ctx, foreign)
    assert str(exc.value) == 'Run not found'


@pytest.mark.parametrize('name,content,field', [
    ('patients.xlsx', PATIENTS_CSV, 'fileName'),
    ('patients.csv', '   \n', 'fileContent'),
    ('patients.csv', 'data:text/csv;base64,@@@', 'fileContent'),
])
def test_upload_input_is_validated(member_ctx, run, name, content, field):
    with pytest.raises(ValidationFailed) as exc:
        _upload(member_ctx, run, content, name)
    assert field in exc.value.detail


def test_upload_size_limit(member_ctx, run, settings):
    settings.RUN_UPLOAD_MAX_BYTES = 10
    with pytest.raises(ValidationFailed) as exc:
        _upload(member_ctx, run)
    assert exc.value.detail['fileContent'] == ['File is too large']


def test_http_upload_file(member_client, run, published, quiet_publish):
    r = member_client.post('/api/rpc/run.uploadFile', {
        'runId': str(run.id), 'fileName': 'patients.csv', 'fileContent': PATIENTS_CSV,
    }, format='json')
    assert r.status_code == 200
    assert r.json()['data']['rowsAdded'] == 2


@pytest.fixture
def patient(org):
    patient = Patient.objects.create(patient_hash='h1', first_name='Ann', last_name='Lee',
                                     primary_phone='5552223333')
    OrganizationPatient.objects.create(organization=org, patient=patient)
    return patient


def test_manual_call_is_queued(member_ctx, org, patient, campaign, revalidated):
    call = call_actions.create_manual_call(member_ctx, {
        'patientId': str(patient.id), 'agentId': 'agent_1', 'campaignId': str(campaign.id),
        'variables': {'reason': 'follow up'},
    })
    assert call['status'] == 'pending'
    assert call['direction'] == 'outbound'
    assert call['toNumber'] == '5552223333'
    assert call['fromNumber'] == '5551234567'
    assert call['campaignName'] == 'Recall'
    assert call['metadata'] == {'manual': True, 'variables': {'reason': 'follow up'}}
    assert Call.objects.filter(organization=org, patient=patient).count() == 1
    assert revalidated == [f'/patients/{patient.id}', '/calls']


def test_manual_call_for_foreign_patient_is_not_found(member_ctx, other_org, revalidated):
    stranger = Patient.objects.create(patient_hash='h2', primary_phone='5550000000')
    OrganizationPatient.objects.create(organization=other_org, patient=stranger)
    with pytest.raises(ActionError) as exc:
        call_actions.create_manual_call(member_ctx, {'patientId': str(stranger.id), 'agentId': 'agent_1'})
    assert str(exc.value) == 'Patient not found'
    assert Call.objects.count() == 0


def test_manual_call_with_unknown_campaign(member_ctx, patient, revalidated):
    with pytest.raises(ActionError) as exc:
        call_actions.create_manual_call(member_ctx, {
            'patientId': str(patient.id), 'agentId': 'agent_1', 'campaignId': str(uuid.uuid4()),
        })
    assert str(exc.value) == 'Campaign not found'


def test_manual_call_needs_a_phone(member_ctx, org, revalidated):
    silent = Patient.objects.create(patient_hash='h3', first_name='No', last_name='Phone')
    OrganizationPatient.objects.create(organization=org, patient=silent)
    with pytest.raises(ActionError) as exc:
        call_actions.create_manual_call(member_ctx, {'patientId': str(silent.id), 'agentId': 'agent_1'})
    assert str(exc.value) == 'Patient has no phone number'


def test_http_manual_call(member_client, patient, quiet_publish):
    r = member_client.post('/api/rpc/call.create', {'patientId': str(patient.id), 'agentId': 'agent_1'},
                           format='json')
    assert r.status_code == 200
    assert r.json()['data']['metadata']['manual'] is True
