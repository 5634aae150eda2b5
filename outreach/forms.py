from django import forms

from .models import Campaign


class CampaignCreateForm(forms.Form):
    """Server-rendered counterpart of the admin ``createCampaign`` procedure."""
    name = forms.CharField(max_length=256)
    description = forms.CharField(widget=forms.Textarea(attrs={'rows': 3}), required=False)
    orgId = forms.UUIDField(label='Organization')
    agentId = forms.CharField(max_length=256, label='Agent ID')
    llmId = forms.CharField(max_length=256, label='LLM ID')
    direction = forms.ChoiceField(choices=Campaign.DIRECTION_CHOICES, initial=Campaign.DIRECTION_OUTBOUND)
    basePrompt = forms.CharField(widget=forms.Textarea(attrs={'rows': 8}), label='Base prompt')
    voicemailMessage = forms.CharField(widget=forms.Textarea(attrs={'rows': 3}), required=False,
                                       label='Voicemail message')
