from lms_backend.auth.permissions import CallerContext
from lms_backend.errors import AccessDeniedError


def verify_participant(conversation: dict, caller: CallerContext) -> dict:
    """
    Validates the caller is one of the two participants

    Raises:
        403: Not a participant
    """
    for participant in conversation["participants"]:
        if participant["id"] == caller.identity_id and participant["variant"] == caller.variant.value:
            return conversation

    raise AccessDeniedError("You are not a participant of this conversation")


def verify_acting_as(caller: CallerContext, identity_id: str, variant: str, action: str):
    """Raises 403 unless (identity_id, variant) is the authenticated caller"""
    if identity_id != caller.identity_id or variant != caller.variant.value:
        raise AccessDeniedError(f"You can only {action} as yourself")
