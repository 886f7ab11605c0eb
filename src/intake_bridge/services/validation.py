"""Pre-submission validation of the intake form.

Checks run in a fixed order and stop at the first failure, so the user sees
one message at a time. Nothing here touches the network.
"""

from intake_bridge.core.types import SurveyForm
from intake_bridge.exceptions import ValidationError

CONTACT_METHOD_REQUIRED = "Please select at least one contact method."
SERVICE_REQUIRED = "Please select a service or describe other services needed."
UNIT_INFO_REQUIRED = "Please provide unit information or site directions."
TIMELINE_REQUIRED = "Please select a timeline."


def validate_survey(form: SurveyForm) -> None:
    """Raise :class:`ValidationError` for the first rule ``form`` breaks."""
    if not form.contact_methods:
        raise ValidationError(CONTACT_METHOD_REQUIRED)
    if not form.services and not form.other_service.strip():
        raise ValidationError(SERVICE_REQUIRED)
    if not form.unit_info.strip():
        raise ValidationError(UNIT_INFO_REQUIRED)
    if not form.timeline:
        raise ValidationError(TIMELINE_REQUIRED)
