"""
Access policy – combine the stage check and the authorization check into
one decision per form, and derive each field's visibility from it.
"""

from typing import List, Optional, Union

from eeg_workflow.config import (
    DEFAULT_REQUIRED_PERMISSION,
    MESSAGE_INSUFFICIENT_PERMISSION,
    MESSAGE_WRONG_STAGE,
    PURPOSE_PERMISSIONS,
)
from eeg_workflow.lifecycle import is_current_stage, parse_purpose, required_stage
from eeg_workflow.models import AccessDecision, Exam, FieldMeta, FormPurpose, User, Visibility
from eeg_workflow.rbac import has_permission, has_role


def is_authorized(user: Optional[User], required_permission: str) -> bool:
    # Either credential is enough: a capability-table grant, or a role
    # label equal to the permission name.
    return has_permission(user, required_permission) or has_role(user, required_permission)


def resolve(
    user: Optional[User],
    exam: Optional[Exam],
    purpose: Union[FormPurpose, str, None],
    required_permission: str,
) -> AccessDecision:
    """Decide whether ``user`` may edit the ``purpose`` form of ``exam`` right now."""
    stage = required_stage(purpose)
    correct_stage = is_current_stage(exam, purpose)
    authorized = is_authorized(user, required_permission)
    editable = authorized and correct_stage

    message = None
    if not authorized:
        message = MESSAGE_INSUFFICIENT_PERMISSION
    elif not correct_stage:
        message = MESSAGE_WRONG_STAGE.format(stage=stage.value)

    return AccessDecision(
        editable=editable,
        correct_stage=correct_stage,
        authorized=authorized,
        required_stage=stage,
        message=message,
    )


def required_permission_for(purpose: Union[FormPurpose, str, None]) -> str:
    return PURPOSE_PERMISSIONS.get(parse_purpose(purpose).value, DEFAULT_REQUIRED_PERMISSION)


def resolve_for_form(
    user: Optional[User],
    exam: Optional[Exam],
    purpose: Union[FormPurpose, str, None],
) -> AccessDecision:
    return resolve(user, exam, purpose, required_permission_for(purpose))


def allowed_purposes(user: Optional[User]) -> List[FormPurpose]:
    """Stage forms the user may open from an exam's action bar (permission table only)."""
    return [
        FormPurpose(purpose)
        for purpose, permission in PURPOSE_PERMISSIONS.items()
        if has_permission(user, permission)
    ]


def field_visibility(meta: Optional[FieldMeta], editable: bool) -> Visibility:
    if editable:
        return Visibility.EDITABLE
    if meta is not None and meta.sensitive:
        return Visibility.HIDDEN
    return Visibility.VISIBLE
