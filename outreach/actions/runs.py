from outreach.auth import AuthContext, require_org
from outreach.serializers.runs import (
    RunActionSerializer, RunCreateSerializer, RunListQuerySerializer, RunRowsQuerySerializer,
    RunUploadSerializer,
)
from outreach.services import audit
from outreach.services import run_files as run_file_service
from outreach.services import runs as run_service
from outreach.services.views_cache import revalidate_path

from .base import unwrap, unwrap_or_none, validate


def get_runs(ctx: AuthContext, params):
    ctx = require_org(ctx)
    v = validate(RunListQuerySerializer, params)
    return unwrap(run_service.get_all(
        campaign_id=v['campaignId'], org_id=ctx.org_id, limit=v['limit'], offset=v['offset'],
    ))


def get_run(ctx: AuthContext, run_id):
    ctx = require_org(ctx)
    return unwrap_or_none(run_service.get_by_id(run_id, ctx.org_id))


def get_run_rows(ctx: AuthContext, params):
    ctx = require_org(ctx)
    v = validate(RunRowsQuerySerializer, params)
    return unwrap(run_service.get_run_rows(
        run_id=v['runId'], org_id=ctx.org_id, limit=v['limit'], offset=v['offset'],
        filter=v.get('filter', ''),
    ))


def create_run(ctx: AuthContext, data):
    ctx = require_org(ctx)
    v = validate(RunCreateSerializer, data)
    run = unwrap(run_service.create_run(
        campaign_id=v['campaignId'],
        org_id=ctx.org_id,
        name=v['name'],
        custom_prompt=v.get('customPrompt', ''),
        custom_voicemail_message=v.get('customVoicemailMessage', ''),
        scheduled_at=v.get('scheduledAt'),
        metadata=v.get('metadata'),
    ))
    audit.log_action(user_id=ctx.user_id, action='run.create', object_type='run', object_id=run.get('id'))
    revalidate_path(f"/campaigns/{v['campaignId']}/runs", "/")
    return run


def _transition(ctx, data, fn, verb):
    ctx = require_org(ctx)
    v = validate(RunActionSerializer, data)
    run_id = str(v['runId'])
    # resolve the campaign first so the revalidated path is the run's own page
    run = unwrap(run_service.get_by_id(run_id, ctx.org_id))
    result = unwrap(fn(run_id, ctx.org_id))
    audit.log_action(user_id=ctx.user_id, action=f'run.{verb}', object_type='run', object_id=run_id)
    revalidate_path(f"/campaigns/{run['campaignId']}/runs/{run_id}", "/")
    return result


def start_run(ctx: AuthContext, data):
    return _transition(ctx, data, run_service.start, 'start')


def pause_run(ctx: AuthContext, data):
    return _transition(ctx, data, run_service.pause, 'pause')


def upload_run_file(ctx: AuthContext, data):
    ctx = require_org(ctx)
    v = validate(RunUploadSerializer, data)
    run_id = str(v['runId'])
    run = unwrap(run_service.get_by_id(run_id, ctx.org_id))
    result = unwrap(run_file_service.upload_rows(
        run_id=run_id, org_id=ctx.org_id, file_name=v['fileName'], content=v['fileContent'],
    ))
    audit.log_action(user_id=ctx.user_id, action='run.upload', object_type='run', object_id=run_id,
                     detail={'fileName': v['fileName'], 'rowsAdded': result['rowsAdded'],
                             'invalidRows': result['invalidRows']})
    revalidate_path(f"/campaigns/{run['campaignId']}/runs/{run_id}", '/patients', '/')
    return result
