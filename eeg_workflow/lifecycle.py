"""
Exam lifecycle – ordered stages, stage required by each form, transition rule.

Pure queries only: advancing an exam is done by whoever persists it.
"""

from typing import Optional, Union

from eeg_workflow.config import STAGE_ALIASES
from eeg_workflow.models import Exam, FormPurpose, Stage

STAGE_ORDER = list(Stage)

_PURPOSE_STAGES = {
    FormPurpose.OBSERVATION: Stage.OBSERVATION,
    FormPurpose.ENREGISTREMENT: Stage.ENREGISTREMENT,
    FormPurpose.ANALYSE: Stage.ANALYSE,
    FormPurpose.INTERPRETATION: Stage.INTERPRETATION,
}


class UnknownStageError(ValueError):
    """Raised for a stage value outside the lifecycle enumeration."""


def parse_stage(value: Union[Stage, str, None]) -> Stage:
    """Return the Stage for a canonical value or a legacy alias."""
    if isinstance(value, Stage):
        return value
    if isinstance(value, str):
        raw = value.strip()
        raw = STAGE_ALIASES.get(raw, raw)
        try:
            return Stage(raw)
        except ValueError:
            pass
    raise UnknownStageError(f"Unknown exam stage: {value!r}")


def parse_purpose(value: Union[FormPurpose, str, None]) -> FormPurpose:
    """Unrecognised purposes fall back to DEFAULT instead of raising."""
    if isinstance(value, FormPurpose):
        return value
    if isinstance(value, str):
        try:
            return FormPurpose(value.strip().lower())
        except ValueError:
            return FormPurpose.DEFAULT
    return FormPurpose.DEFAULT


def required_stage(purpose: Union[FormPurpose, str, None]) -> Stage:
    """Stage an exam must be in for the form of this purpose to be editable."""
    return _PURPOSE_STAGES.get(parse_purpose(purpose), Stage.TERMINE)


def stage_index(stage: Union[Stage, str]) -> int:
    return STAGE_ORDER.index(parse_stage(stage))


def is_current_stage(exam: Optional[Exam], purpose: Union[FormPurpose, str, None]) -> bool:
    """
    True when the exam sits exactly at the stage the form needs.
    A missing exam or an unreadable stage never matches.
    """
    if exam is None:
        return False
    try:
        current = parse_stage(getattr(exam, "stage", None))
    except UnknownStageError:
        return False
    return current == required_stage(purpose)


def next_stage(stage: Union[Stage, str]) -> Optional[Stage]:
    """The only stage an exam may move to next, or None once finished."""
    idx = stage_index(stage)
    if idx + 1 >= len(STAGE_ORDER):
        return None
    return STAGE_ORDER[idx + 1]


def can_advance(current: Union[Stage, str], target: Union[Stage, str]) -> bool:
    """Stages move forward one step at a time; no skipping, no going back."""
    return next_stage(current) == parse_stage(target)


def is_terminal(stage: Union[Stage, str]) -> bool:
    return parse_stage(stage) == Stage.TERMINE
