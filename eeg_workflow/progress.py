"""
Workflow progress – classify each step of the exam workflow for display.
"""

from collections.abc import Mapping
from typing import Any, List, Optional, Sequence, Tuple, Union

from eeg_workflow.config import WORKFLOW_STEPS
from eeg_workflow.lifecycle import parse_stage, stage_index
from eeg_workflow.models import Stage, StepStatus

COMPLETED = "completed"
ACTIVE = "active"
FUTURE = "future"


def render(
    stages: Optional[Sequence[Any]],
    current_stage: Union[Stage, str],
) -> List[StepStatus]:
    """
    Classify each step record against the current stage.

    Records are ``(id, label)`` pairs or mappings with ``id`` and ``label``
    keys. Entries before the current stage are completed, the entry at its
    position is active, later ones are future. Creation always counts as
    completed. Completed and active entries are clickable.
    """
    if stages is None:
        stages = WORKFLOW_STEPS
    current = stage_index(current_stage)

    steps = []
    for position, entry in enumerate(stages):
        step_id, label = _unpack(entry)
        if position < current or _is_creation(step_id):
            status = COMPLETED
        elif position == current:
            status = ACTIVE
        else:
            status = FUTURE
        steps.append(StepStatus(
            id=step_id,
            label=label,
            status=status,
            clickable=status != FUTURE,
        ))
    return steps


def _unpack(entry) -> Tuple[Any, Any]:
    if isinstance(entry, Mapping):
        return entry["id"], entry["label"]
    step_id, label = entry
    return step_id, label


def _is_creation(step_id) -> bool:
    try:
        return parse_stage(step_id) == Stage.CREATION
    except ValueError:
        return False


def format_progress(steps: List[StepStatus]) -> str:
    """One-line text rendering, e.g. ``[x] Création > [>] Observation > [ ] Analyse``."""
    marks = {COMPLETED: "[x]", ACTIVE: "[>]", FUTURE: "[ ]"}
    return " > ".join(f"{marks[s.status]} {s.label}" for s in steps)
