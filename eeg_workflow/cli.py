"""
Interactive CLI for the EEG exam workflow.
Look up an exam, see where it stands, and preview which form fields the
logged-in user may edit.
"""

import json
import sys

from eeg_workflow.config import WORKFLOW_STEPS
from eeg_workflow.database import init_engine, load_exam
from eeg_workflow.forms import iter_fields, node_from_dict
from eeg_workflow.gate import gate_form
from eeg_workflow.lifecycle import UnknownStageError
from eeg_workflow.policy import allowed_purposes
from eeg_workflow.progress import format_progress, render
from eeg_workflow.api.auth import user_from_claims, verify_token


def load_form_definitions(path: str) -> dict:
    """Read ``{purpose: tree}`` form definitions from a JSON file."""
    with open(path, encoding="utf-8") as fh:
        data = json.load(fh)
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected an object mapping purpose -> form tree")
    return data


def describe_fields(tree) -> str:
    lines = []
    for leaf in iter_fields(tree):
        state = "locked" if leaf.disabled else "editable"
        lines.append(f"  - {leaf.meta.name}: {state}")
    return "\n".join(lines) if lines else "  (no fields)"


def main():
    print("=== EEG Exam Workflow: access preview ===\n")

    engine = init_engine()

    # ── Login ────────────────────────────────────────────────────────
    try:
        token = input("Enter access token (or 'quit'): ").strip()
    except (EOFError, KeyboardInterrupt):
        print("\nExiting.")
        return

    if not token or token.lower() in {"quit", "exit"}:
        print("Goodbye.")
        return

    claims = verify_token(token)
    if not claims:
        print("\n[ERROR] Login failed: invalid or expired token.")
        return
    user = user_from_claims(claims)

    print(f"\n[auth] Logged in as: {user.display_name or user.user_id} (role={user.role_label})")
    actions = ", ".join(p.value for p in allowed_purposes(user)) or "none"
    print(f"[auth] Stage forms available: {actions}")

    try:
        path = input("\nForm definitions JSON file (blank to skip): ").strip()
    except (EOFError, KeyboardInterrupt):
        print("\nExiting.")
        return

    forms = {}
    if path:
        try:
            forms = load_form_definitions(path)
        except (OSError, ValueError) as e:
            print("\n[WARN] Could not load form definitions; continuing without them.")
            print("Details:", e)

    # ── REPL ─────────────────────────────────────────────────────────
    while True:
        try:
            line = input("\nExam id and form purpose, e.g. 'EX-12 analyse' (or 'quit'): ").strip()
        except (EOFError, KeyboardInterrupt):
            print("\nExiting.")
            break

        if not line:
            continue
        if line.lower() in {"quit", "exit"}:
            print("Goodbye.")
            break

        parts = line.split()
        if len(parts) != 2:
            print("[ERROR] Expected two words: <exam_id> <purpose>", file=sys.stderr)
            continue
        exam_id, purpose = parts

        # 1) Load exam
        try:
            exam = load_exam(engine, exam_id)
        except UnknownStageError as e:
            print("\n[DB ERROR] Exam has an invalid stage.")
            print("Details:", e)
            continue
        except Exception as e:
            print("\n[DB ERROR] Database error while loading the exam.")
            print("Details:", e)
            continue

        if exam is None:
            print(f"\n[WARN] Exam {exam_id} not found; every field stays locked.")
        else:
            # 2) Progress
            print("\n[Progress]")
            print(format_progress(render(WORKFLOW_STEPS, exam.stage)))

        # 3) Access decision + gated form
        tree = node_from_dict(forms.get(purpose, {"children": []}))
        result = gate_form(user, exam, purpose, tree)
        decision = result.decision

        print("\n[Access]")
        print(f"editable={decision.editable} required_stage={decision.required_stage.value}")
        if decision.message:
            print(f"Notice: {decision.message}")

        if purpose in forms:
            print("\n[Fields]")
            print(describe_fields(result.tree))


if __name__ == "__main__":
    main()
