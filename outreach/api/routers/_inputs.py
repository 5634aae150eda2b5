from outreach.actions.base import validate
from outreach.serializers.common import IdInputSerializer


def input_id(input):
    """Accept ``"<uuid>"`` or ``{"id": "<uuid>"}`` and return the id as a string."""
    data = {'id': input} if isinstance(input, str) else input
    return str(validate(IdInputSerializer, data)['id'])
