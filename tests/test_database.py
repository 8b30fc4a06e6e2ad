"""
Unit tests for the exam snapshot adapter and environment helpers.
"""

import pytest

from sqlalchemy import create_engine, text

from eeg_workflow.config import get_env
from eeg_workflow.database import init_engine, load_exam
from eeg_workflow.lifecycle import UnknownStageError
from eeg_workflow.models import Stage


# ── Helpers / Fakes ──────────────────────────────────────────────────

class FakeResult:
    """Mimic SQLAlchemy Result with .mappings().first()."""
    def __init__(self, row_dict_or_none):
        self._row = row_dict_or_none

    def mappings(self):
        return self

    def first(self):
        return self._row


class FakeConn:
    def __init__(self, row_dict_or_none=None):
        self._row = row_dict_or_none
        self.executed = []

    def execute(self, sql, params=None):
        self.executed.append((sql, params))
        return FakeResult(self._row)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        return False


class FakeEngine:
    """Mimic engine.connect() context manager."""
    def __init__(self, row_dict_or_none=None):
        self._row = row_dict_or_none
        self.connect_calls = 0
        self.last_conn = None

    def connect(self):
        self.connect_calls += 1
        self.last_conn = FakeConn(self._row)
        return self.last_conn


# ── Tests: get_env ───────────────────────────────────────────────────

def test_get_env_ok(monkeypatch):
    monkeypatch.setenv("X", "123")
    assert get_env("X") == "123"


def test_get_env_missing_exits(monkeypatch, capsys):
    monkeypatch.delenv("MISSING_ENV", raising=False)
    with pytest.raises(SystemExit) as e:
        get_env("MISSING_ENV")
    assert e.value.code == 1
    err = capsys.readouterr().err
    assert "ERROR: env var MISSING_ENV is not set" in err


# ── Tests: init_engine ───────────────────────────────────────────────

def test_init_engine_checks_exams_table(tmp_path, capsys):
    uri = f"sqlite:///{tmp_path / 'exams.db'}"
    with create_engine(uri).begin() as conn:
        conn.execute(text("CREATE TABLE examens (id TEXT, etat TEXT, patient_id TEXT)"))
        conn.execute(text("INSERT INTO examens VALUES ('EX-1', 'Analyse', NULL)"))

    engine = init_engine(uri)
    assert "[init]" in capsys.readouterr().out
    assert load_exam(engine, "EX-1").stage is Stage.ANALYSE


def test_init_engine_missing_table_exits(capsys):
    with pytest.raises(SystemExit) as e:
        init_engine("sqlite://")
    assert e.value.code == 1
    assert "examens" in capsys.readouterr().err


# ── Tests: load_exam ─────────────────────────────────────────────────

def test_load_exam_ok():
    engine = FakeEngine({"id": 12, "etat": "Analyse", "patient_id": 300})
    exam = load_exam(engine, "12")
    assert exam.id == "12"
    assert exam.stage is Stage.ANALYSE
    assert exam.patient_ref == "300"
    assert engine.last_conn.executed[0][1] == {"id": "12"}


def test_load_exam_legacy_stage_spelling():
    engine = FakeEngine({"id": "EX-3", "etat": "Interpretation", "patient_id": None})
    exam = load_exam(engine, "EX-3")
    assert exam.stage is Stage.INTERPRETATION
    assert exam.patient_ref is None


def test_load_exam_missing_row():
    assert load_exam(FakeEngine(None), "nope") is None


def test_load_exam_invalid_stage_raises():
    engine = FakeEngine({"id": 1, "etat": "Perdu", "patient_id": 1})
    with pytest.raises(UnknownStageError):
        load_exam(engine, "1")
