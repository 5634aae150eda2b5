import logging
from typing import Any, Dict, List, Optional

from django.db import transaction

from outreach.models import Campaign, CampaignRequest, CampaignTemplate
from outreach.results import NOT_FOUND, ServiceResult, create_error, create_success, handle_service_error

logger = logging.getLogger(__name__)


def format_template(template: Optional[CampaignTemplate]) -> Optional[Dict[str, Any]]:
    if template is None:
        return None
    return {
        'id': str(template.id),
        'name': template.name,
        'description': template.description,
        'agentId': template.agent_id,
        'llmId': template.llm_id,
        'config': {
            'basePrompt': template.base_prompt,
            'voicemailMessage': template.voicemail_message,
            'variables': template.variables_config,
            'analysis': template.analysis_config,
        },
    }


def format_campaign(campaign: Campaign) -> Dict[str, Any]:
    return {
        'id': str(campaign.id),
        'orgId': str(campaign.organization_id),
        'templateId': str(campaign.template_id) if campaign.template_id else None,
        'name': campaign.name,
        'direction': campaign.direction,
        'isActive': campaign.is_active,
        'isDefaultInbound': campaign.is_default_inbound,
        'metadata': campaign.metadata,
        'createdAt': campaign.created_at.isoformat(),
    }


def format_request(req: CampaignRequest) -> Dict[str, Any]:
    return {
        'id': str(req.id),
        'orgId': str(req.organization_id),
        'requestedBy': req.requested_by_id,
        'name': req.name,
        'direction': req.direction,
        'description': req.description,
        'mainGoal': req.main_goal,
        'desiredAnalysis': req.desired_analysis,
        'exampleSheets': req.example_sheets,
        'status': req.status,
        'adminNotes': req.admin_notes,
        'resultingCampaignId': str(req.resulting_campaign_id) if req.resulting_campaign_id else None,
        'createdAt': req.created_at.isoformat(),
        'updatedAt': req.updated_at.isoformat(),
    }


def get_by_id(campaign_id: str, org_id: Optional[str] = None) -> ServiceResult:
    """Campaign plus template config.  ``org_id=None`` skips the tenant check (admin use)."""
    try:
        qs = Campaign.objects.select_related('template').filter(id=campaign_id)
        if org_id is not None:
            qs = qs.filter(organization_id=org_id)
        campaign = qs.first()
        if campaign is None:
            return create_error(NOT_FOUND, 'Campaign not found')
        if campaign.template is None:
            return create_error(NOT_FOUND, 'Campaign template not found')
        return create_success({
            'campaign': format_campaign(campaign),
            'template': format_template(campaign.template),
        })
    except Exception as e:
        return handle_service_error(e, 'Failed to fetch campaign')


def get_all_by_org(org_id: str) -> ServiceResult:
    try:
        qs = Campaign.objects.filter(organization_id=org_id).order_by('-created_at')
        return create_success([format_campaign(c) for c in qs])
    except Exception as e:
        return handle_service_error(e, 'Failed to fetch campaigns')


def get_all() -> ServiceResult:
    try:
        qs = Campaign.objects.select_related('organization').order_by('-created_at')
        data = []
        for c in qs:
            item = format_campaign(c)
            item['organizationName'] = c.organization.name
            data.append(item)
        return create_success(data)
    except Exception as e:
        return handle_service_error(e, 'Failed to fetch campaigns')


def create(*, org_id: str, name: str, description: str, agent_id: str, llm_id: str, direction: str,
           base_prompt: str, voicemail_message: str = '', variables_config: Optional[dict] = None,
           analysis_config: Optional[dict] = None, request_id: Optional[str] = None,
           created_by: Optional[int] = None) -> ServiceResult:
    """Create a template and a campaign on it; completes the originating request if given."""
    try:
        with transaction.atomic():
            template = CampaignTemplate.objects.create(
                name=name,
                description=description,
                agent_id=agent_id,
                llm_id=llm_id,
                base_prompt=base_prompt,
                voicemail_message=voicemail_message,
                variables_config=variables_config or {},
                analysis_config=analysis_config or {},
                created_by_id=created_by,
            )
            campaign = Campaign.objects.create(
                organization_id=org_id,
                template=template,
                name=name,
                direction=direction,
                is_active=True,
            )
            if request_id:
                CampaignRequest.objects.filter(id=request_id).update(
                    status='completed', resulting_campaign=campaign,
                )
        logger.info('campaign %s created for org %s', campaign.id, org_id)
        data = format_campaign(campaign)
        data['template'] = format_template(template)
        return create_success(data)
    except Exception as e:
        return handle_service_error(e, 'Failed to create campaign')


def create_request(*, org_id: str, requested_by: Optional[int], name: str, description: str,
                   direction: str = 'outbound', main_goal: str = '',
                   desired_analysis: Optional[List[str]] = None,
                   example_sheets: Optional[List[dict]] = None) -> ServiceResult:
    try:
        req = CampaignRequest.objects.create(
            organization_id=org_id,
            requested_by_id=requested_by,
            name=name,
            description=description,
            direction=direction,
            main_goal=main_goal,
            desired_analysis=desired_analysis or [],
            example_sheets=example_sheets or [],
            status='pending',
        )
        return create_success(format_request(req))
    except Exception as e:
        return handle_service_error(e, 'Failed to create campaign request')


def get_requests(*, org_id: Optional[str] = None, status: str = 'all', limit: int = 50,
                 offset: int = 0) -> ServiceResult:
    try:
        qs = CampaignRequest.objects.all()
        if org_id:
            qs = qs.filter(organization_id=org_id)
        if status and status != 'all':
            qs = qs.filter(status=status)
        total = qs.count()
        page = qs.order_by('-created_at')[offset:offset + limit]
        return create_success({
            'requests': [format_request(r) for r in page],
            'totalCount': total,
            'hasMore': offset + limit < total,
        })
    except Exception as e:
        return handle_service_error(e, 'Failed to fetch campaign requests')


def process_request(*, request_id: str, status: str, admin_notes: str = '',
                    resulting_campaign_id: Optional[str] = None) -> ServiceResult:
    try:
        req = CampaignRequest.objects.filter(id=request_id).first()
        if req is None:
            return create_error(NOT_FOUND, 'Campaign request not found')
        req.status = status
        req.admin_notes = admin_notes
        if resulting_campaign_id:
            req.resulting_campaign_id = resulting_campaign_id
        req.save(update_fields=['status', 'admin_notes', 'resulting_campaign', 'updated_at'])
        return create_success(format_request(req))
    except Exception as e:
        return handle_service_error(e, 'Failed to process campaign request')
