import logging

from django.contrib.auth.decorators import login_required
from django.core.exceptions import PermissionDenied
from django.middleware.csrf import get_token
from django.shortcuts import redirect, render
from django.utils.http import url_has_allowed_host_and_scheme
from django.views.decorators.http import require_POST

from ..actions import admin as admin_actions
from ..auth import auth_context_for_user
from ..exceptions import ActionError, Forbidden, Unauthenticated, ValidationFailed
from ..forms import CampaignCreateForm
from ..templatetags.outreach_ui import campaign_create_sheet

logger = logging.getLogger(__name__)


def _render_sheet(request, form, status):
    context = campaign_create_sheet({'csrf_token': get_token(request)}, form=form, open=True)
    return render(request, 'outreach/components/campaign_create_sheet.html', context, status=status)


@login_required
@require_POST
def create_campaign(request):
    """Handle the campaign create sheet; re-render it open with errors on failure."""
    ctx = auth_context_for_user(request.user)
    if not ctx.is_super_admin:
        raise PermissionDenied('Admin privileges required')

    form = CampaignCreateForm(request.POST)
    if not form.is_valid():
        return _render_sheet(request, form, 400)

    try:
        campaign = admin_actions.create_campaign(ctx, form.cleaned_data)
    except ValidationFailed as e:
        for field, messages in e.detail.items():
            for message in messages if isinstance(messages, list) else [messages]:
                form.add_error(field if field in form.fields else None, str(message))
        return _render_sheet(request, form, 400)
    except ActionError as e:
        form.add_error(None, str(e))
        return _render_sheet(request, form, 400)
    except (Unauthenticated, Forbidden) as e:
        raise PermissionDenied(str(e))

    logger.info('campaign %s created from form by user %s', campaign['id'], ctx.user_id)
    next_url = request.POST.get('next', '')
    if not url_has_allowed_host_and_scheme(next_url, allowed_hosts={request.get_host()},
                                           require_https=request.is_secure()):
        next_url = '/'
    return redirect(next_url)
