"""
Database engine initialisation and read-only exam snapshots.
"""

import sys
from typing import Optional

from sqlalchemy import create_engine, text

from eeg_workflow.config import get_env, EXAMS_TABLE
from eeg_workflow.lifecycle import parse_stage
from eeg_workflow.models import Exam


def init_engine(db_uri: Optional[str] = None):
    """Create an engine for DB_URI and check the exams table is readable."""
    engine = create_engine(db_uri or get_env("DB_URI"), pool_pre_ping=True, future=True)
    try:
        with engine.connect() as conn:
            conn.execute(text(f"SELECT COUNT(*) FROM {EXAMS_TABLE} WHERE 1 = 0"))
    except Exception as e:
        print(f"ERROR: table {EXAMS_TABLE} is not reachable:", e, file=sys.stderr)
        sys.exit(1)
    print(f"[init] Exam snapshots read from {EXAMS_TABLE}.")
    return engine


def load_exam(engine, exam_id: str) -> Optional[Exam]:
    """Read the stage snapshot of one exam, or None if it does not exist."""
    sql = text(f"""
        SELECT id, etat, patient_id
        FROM {EXAMS_TABLE}
        WHERE id = :id
    """)
    with engine.connect() as conn:
        row = conn.execute(sql, {"id": exam_id}).mappings().first()

    if not row:
        return None

    return Exam(
        id=str(row["id"]),
        stage=parse_stage(row["etat"]),
        patient_ref=str(row["patient_id"]) if row["patient_id"] is not None else None,
    )
