"""
Unit tests for the exam lifecycle – stage order, required stages, transitions.
"""

import pytest

from eeg_workflow.lifecycle import (
    UnknownStageError,
    can_advance,
    is_current_stage,
    is_terminal,
    next_stage,
    parse_purpose,
    parse_stage,
    required_stage,
    stage_index,
)
from eeg_workflow.models import Exam, FormPurpose, Stage


# ── Tests: required_stage ────────────────────────────────────────────

@pytest.mark.parametrize("purpose, expected", [
    ("observation", Stage.OBSERVATION),
    ("enregistrement", Stage.ENREGISTREMENT),
    ("analyse", Stage.ANALYSE),
    ("interpretation", Stage.INTERPRETATION),
])
def test_required_stage_table(purpose, expected):
    assert required_stage(purpose) == expected
    assert required_stage(FormPurpose(purpose)) == expected


@pytest.mark.parametrize("purpose", ["default", "admission", "", None, 42])
def test_required_stage_unknown_purpose_falls_back_to_termine(purpose):
    assert required_stage(purpose) == Stage.TERMINE


def test_required_stage_normalises_case_and_spaces():
    assert required_stage(" Observation ") == Stage.OBSERVATION


def test_parse_purpose_never_raises():
    assert parse_purpose("bogus") is FormPurpose.DEFAULT
    assert parse_purpose(None) is FormPurpose.DEFAULT
    assert parse_purpose(["analyse"]) is FormPurpose.DEFAULT


# ── Tests: stage_index / parse_stage ─────────────────────────────────

def test_stage_index_follows_lifecycle_order():
    assert [stage_index(s) for s in Stage] == [0, 1, 2, 3, 4, 5]
    assert stage_index("Creation") == 0
    assert stage_index("Terminé") == 5


def test_stage_index_accepts_legacy_aliases():
    assert stage_index("Interpretation") == stage_index(Stage.INTERPRETATION)
    assert stage_index("Terminer") == stage_index(Stage.TERMINE)
    assert parse_stage("Création") is Stage.CREATION


def test_stage_index_unknown_stage_raises():
    with pytest.raises(UnknownStageError, match="Unknown exam stage"):
        stage_index("Archivé")


def test_unknown_stage_error_is_value_error():
    with pytest.raises(ValueError):
        parse_stage(None)


# ── Tests: is_current_stage ──────────────────────────────────────────

def test_is_current_stage_match():
    exam = Exam(id="EX-1", stage=Stage.ANALYSE)
    assert is_current_stage(exam, "analyse") is True
    assert is_current_stage(exam, "observation") is False


def test_is_current_stage_missing_exam_never_matches():
    for purpose in ("observation", "enregistrement", "analyse", "interpretation", "default"):
        assert is_current_stage(None, purpose) is False


def test_is_current_stage_default_purpose_needs_finished_exam():
    assert is_current_stage(Exam(id="EX-2", stage=Stage.TERMINE), "whatever") is True
    assert is_current_stage(Exam(id="EX-3", stage=Stage.INTERPRETATION), "whatever") is False


def test_is_current_stage_unreadable_stage_is_false():
    exam = Exam(id="EX-4", stage="Archivé")
    assert is_current_stage(exam, "analyse") is False


# ── Tests: transitions ───────────────────────────────────────────────

def test_next_stage_walks_forward_one_step():
    assert next_stage(Stage.CREATION) is Stage.OBSERVATION
    assert next_stage("Analyse") is Stage.INTERPRETATION
    assert next_stage(Stage.TERMINE) is None


def test_can_advance_forbids_skips_and_rollbacks():
    assert can_advance(Stage.OBSERVATION, Stage.ENREGISTREMENT) is True
    assert can_advance(Stage.OBSERVATION, Stage.ANALYSE) is False
    assert can_advance(Stage.ANALYSE, Stage.OBSERVATION) is False
    assert can_advance(Stage.TERMINE, Stage.TERMINE) is False


def test_is_terminal():
    assert is_terminal("Terminer") is True
    assert is_terminal(Stage.ANALYSE) is False
