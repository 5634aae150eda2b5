"""
Presentational template tags.

Both tags are pure functions of their arguments: they build a context
dict and render a fixed template, with no data access.

    {% load outreach_ui %}
    {% skeleton_card rows=5 %}
    {% campaign_create_sheet form %}
"""
from django import template

from outreach.forms import CampaignCreateForm

register = template.Library()

SHEET_SIZES = {'sm': 'max-w-sm', 'md': 'max-w-md', 'lg': 'max-w-lg', 'xl': 'max-w-xl'}


@register.inclusion_tag('outreach/components/skeleton_card.html')
def skeleton_card(rows=3, title_width=64, description_width=96, row_height=10):
    return {
        'rows': range(max(int(rows), 0)),
        'title_width': title_width,
        'description_width': description_width,
        'row_height': row_height,
    }


def sheet_context(*, sheet_id, title, button_text, description='', size='md', css_class='', open=False):
    if size not in SHEET_SIZES:
        raise template.TemplateSyntaxError(f'unknown sheet size: {size}')
    return {
        'sheet_id': sheet_id,
        'title': title,
        'description': description,
        'button_text': button_text,
        'size_class': SHEET_SIZES[size],
        'css_class': css_class,
        'open': open,
    }


@register.inclusion_tag('outreach/components/campaign_create_sheet.html', takes_context=True)
def campaign_create_sheet(context, form=None, css_class='', open=False):
    ctx = sheet_context(
        sheet_id='campaign-create-sheet',
        title='Create New Campaign',
        description='Set up a new campaign for your organization',
        button_text='Create Campaign',
        size='lg',
        css_class=css_class,
        open=open,
    )
    ctx['form'] = form if form is not None else CampaignCreateForm()
    ctx['csrf_token'] = context.get('csrf_token')
    return ctx
