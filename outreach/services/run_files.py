"""
Patient lists uploaded into a run.

The CSV's columns are matched to patient fields by header name.  Each
usable line becomes a patient (created or linked through the patient
service) plus a pending ``Row`` carrying the line's values as call
variables.  Lines that break the campaign template's validation rules are
counted and reported, never stored.
"""
import csv
import io
import logging
import re
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

import bleach
from django.db import transaction
from django.db.models import Max
from django.utils import timezone

from outreach.models import Row, Run
from outreach.results import (
    BAD_REQUEST, NOT_FOUND, ServiceResult, create_error, create_success, handle_service_error, is_error,
)
from outreach.services import patients as patient_service
from outreach.services.runs import format_run, publish_status

logger = logging.getLogger(__name__)

# Ordered header variants (first match wins).
PATIENT_COLUMNS = {
    'firstName': ['first name', 'firstname', 'patient first name', 'given name', 'first'],
    'lastName': ['last name', 'lastname', 'patient last name', 'family name', 'surname', 'last'],
    'dob': ['dob', 'date of birth', 'birth date', 'birthdate', 'patient dob'],
    'primaryPhone': ['primary phone', 'phone', 'phone number', 'patient phone', 'cell phone', 'mobile', 'cell'],
    'secondaryPhone': ['secondary phone', 'alternate phone', 'home phone', 'other phone'],
    'emrIdInOrg': ['emr id', 'mrn', 'medical record number', 'patient id'],
}

UPLOADABLE_STATUSES = ('draft', 'ready', 'paused', 'scheduled')
DATE_FORMATS = ('%Y-%m-%d', '%m/%d/%Y', '%m-%d-%Y', '%m/%d/%y', '%m-%d-%y')
DELIMITERS = ',\t|;'
MAX_REPORTED_ERRORS = 50


def _norm(header: str) -> str:
    return re.sub(r'[^a-z0-9]', '', (header or '').lower())


def parse_csv(text: str) -> Tuple[List[str], List[Dict[str, str]]]:
    """Return the stripped headers and the non-empty lines of ``text``."""
    try:
        dialect = csv.Sniffer().sniff(text[:4096], delimiters=DELIMITERS)
    except csv.Error:
        dialect = csv.excel
    try:
        reader = csv.reader(io.StringIO(text), dialect)
        lines = [[cell.strip() for cell in line] for line in reader]
    except csv.Error as e:
        raise ValueError(f'CSV parsing error: {e}')
    lines = [line for line in lines if any(line)]
    if not lines:
        raise ValueError('No data found in CSV file')
    headers = lines[0]
    records = [dict(zip(headers, line)) for line in lines[1:]]
    if not records:
        raise ValueError('No data found in CSV file')
    return headers, records


def map_columns(headers: List[str]) -> Dict[str, str]:
    """Map patient fields to the header that holds them."""
    by_norm = {}
    for h in headers:
        by_norm.setdefault(_norm(h), h)
    mapping, used = {}, set()
    for field, variants in PATIENT_COLUMNS.items():
        for variant in variants:
            header = by_norm.get(_norm(variant))
            if header is not None and header not in used:
                mapping[field] = header
                used.add(header)
                break
    return mapping


def normalize_phone(value: str) -> str:
    digits = re.sub(r'\D', '', value or '')
    if len(digits) == 11 and digits.startswith('1'):
        digits = digits[1:]
    return digits if len(digits) == 10 else ''


def normalize_dob(value: str) -> Optional[str]:
    value = (value or '').strip()
    if not value:
        return None
    today = timezone.localdate()
    for fmt in DATE_FORMATS:
        try:
            parsed = datetime.strptime(value, fmt).date()
        except ValueError:
            continue
        if fmt.endswith('%y') and parsed > today:
            # two-digit years are birth years, never in the future
            parsed = parsed.replace(year=parsed.year - 100)
        if parsed > today:
            return None
        return parsed.isoformat()
    return None


def _patient_config(variables_config: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    cfg = variables_config or {}
    return (cfg.get('variables') or {}).get('patient') or cfg.get('patient') or {}


def _campaign_config(variables_config: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    cfg = variables_config or {}
    return (cfg.get('variables') or {}).get('campaign') or cfg.get('campaign') or {}


def validation_rules(variables_config: Optional[Dict[str, Any]]) -> Dict[str, bool]:
    rules = _patient_config(variables_config).get('validation') or {}
    return {
        # phone is required unless the template turns it off
        'requireValidPhone': bool(rules.get('requireValidPhone', True)),
        'requireValidDOB': bool(rules.get('requireValidDOB', False)),
        'requireName': bool(rules.get('requireName', False)),
    }


def required_campaign_fields(variables_config: Optional[Dict[str, Any]]) -> List[str]:
    fields = _campaign_config(variables_config).get('fields') or []
    return [f['key'] for f in fields if isinstance(f, dict) and f.get('key') and f.get('required')]


def extract_patient(record: Dict[str, str], columns: Dict[str, str],
                    rules: Dict[str, bool]) -> Tuple[Dict[str, str], List[str]]:
    raw = {field: (record.get(header) or '').strip() for field, header in columns.items()}
    problems = []
    phone = normalize_phone(raw.get('primaryPhone', ''))
    if not phone and rules['requireValidPhone']:
        problems.append('Missing or invalid phone number')
    dob = normalize_dob(raw.get('dob', ''))
    if dob is None and rules['requireValidDOB']:
        problems.append('Missing or invalid date of birth')
    first = bleach.clean(raw.get('firstName', ''), strip=True)[:256]
    last = bleach.clean(raw.get('lastName', ''), strip=True)[:256]
    if rules['requireName'] and not (first and last):
        problems.append('Missing patient name')
    secondary = raw.get('secondaryPhone', '')
    fields = {
        'first_name': first,
        'last_name': last,
        'dob': dob or '',
        'primary_phone': phone,
        'secondary_phone': normalize_phone(secondary) or secondary[:20],
        'emr_id_in_org': raw.get('emrIdInOrg', '')[:256],
    }
    return fields, problems


def _row_variables(record: Dict[str, str], fields: Dict[str, str]) -> Dict[str, Any]:
    variables = {header: value for header, value in record.items() if header}
    variables.update({
        'firstName': fields['first_name'],
        'lastName': fields['last_name'],
        'dob': fields['dob'],
        'primaryPhone': fields['primary_phone'],
    })
    return variables


def upload_rows(*, run_id: str, org_id: str, file_name: str, content: str) -> ServiceResult:
    try:
        run = (Run.objects.select_related('campaign__template')
               .filter(id=run_id, organization_id=org_id).first())
        if run is None:
            return create_error(NOT_FOUND, 'Run not found')
        if run.status not in UPLOADABLE_STATUSES:
            return create_error(BAD_REQUEST, f'Rows cannot be added to a run in {run.status} status')
        try:
            headers, records = parse_csv(content)
        except ValueError as e:
            return create_error(BAD_REQUEST, f'Failed to parse file: {e}')

        template = run.campaign.template
        config = template.variables_config if template else {}
        rules = validation_rules(config)
        columns = map_columns(headers)
        if rules['requireValidPhone'] and 'primaryPhone' not in columns:
            return create_error(BAD_REQUEST, 'Missing required column: phone')
        campaign_required = required_campaign_fields(config)
        present = {_norm(h) for h in headers}

        errors, invalid = [], 0
        with transaction.atomic():
            start = Row.objects.filter(run=run).aggregate(m=Max('sort_index'))['m']
            next_index = 0 if start is None else start + 1
            rows = []
            for line_no, record in enumerate(records, start=2):
                fields, problems = extract_patient(record, columns, rules)
                if not problems:
                    result = patient_service.create(**fields, org_id=org_id)
                    if is_error(result):
                        problems = [result.error.message]
                if problems:
                    invalid += 1
                    if len(errors) < MAX_REPORTED_ERRORS:
                        errors.append({'line': line_no, 'errors': problems})
                    continue
                missing = [k for k in campaign_required if _norm(k) not in present]
                rows.append(Row(
                    run=run,
                    organization_id=org_id,
                    patient_id=result.data['id'],
                    variables=_row_variables(record, fields),
                    status='pending',
                    sort_index=next_index + len(rows),
                    metadata={
                        'hasRequiredCampaignFields': not missing,
                        'missingCampaignFields': missing,
                        'columnMappings': columns,
                    },
                ))
            Row.objects.bulk_create(rows)

            run = Run.objects.select_for_update().get(pk=run.pk)
            meta = dict(run.metadata or {})
            counts = dict(meta.get('rows') or {})
            meta['rows'] = {
                'total': counts.get('total', 0) + len(rows),
                'invalid': counts.get('invalid', 0) + invalid,
            }
            run.metadata = meta
            if rows and run.status == 'draft':
                run.status = 'ready'
            run.save(update_fields=['status', 'metadata', 'updated_at'])

        logger.info('run %s: %s rows added, %s invalid from %s', run.id, len(rows), invalid, file_name)
        publish_status(run)
        return create_success({
            'run': format_run(run),
            'fileName': file_name,
            'totalRows': len(records),
            'rowsAdded': len(rows),
            'invalidRows': invalid,
            'errors': errors,
            'columnMappings': columns,
        })
    except Exception as e:
        return handle_service_error(e, 'Failed to process uploaded file')
