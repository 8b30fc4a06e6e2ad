"""
Flask route handlers for the REST API.
"""

import sys
import traceback
from typing import Any, Dict, Optional

from flask import request, jsonify

from eeg_workflow.config import WORKFLOW_STEPS
from eeg_workflow.database import load_exam
from eeg_workflow.forms import field_names, node_from_dict, node_to_dict
from eeg_workflow.gate import gate_form
from eeg_workflow.lifecycle import UnknownStageError, parse_stage, required_stage, stage_index
from eeg_workflow.models import AccessDecision, Exam
from eeg_workflow.policy import allowed_purposes, required_permission_for, resolve
from eeg_workflow.progress import render
from eeg_workflow.api.auth import token_required


def _decision_to_dict(decision: AccessDecision) -> Dict[str, Any]:
    return {
        "editable": decision.editable,
        "correct_stage": decision.correct_stage,
        "authorized": decision.authorized,
        "required_stage": decision.required_stage.value,
        "message": decision.message,
    }


def _exam_from_payload(data: Dict[str, Any]) -> Optional[Exam]:
    """Build an Exam from an inline JSON snapshot; raises UnknownStageError on a bad stage."""
    if not isinstance(data, dict):
        return None
    return Exam(
        id=str(data.get("id", "")),
        stage=parse_stage(data.get("stage", data.get("etat"))),
        patient_ref=data.get("patient_ref"),
    )


def register_routes(app, engine):
    """Register all API routes on the Flask *app*."""

    def _exam_for_request(data: Dict[str, Any]) -> Optional[Exam]:
        if "exam" in data:
            return _exam_from_payload(data["exam"])
        if data.get("exam_id") is not None:
            return load_exam(engine, str(data["exam_id"]))
        return None

    # ── Health / info ────────────────────────────────────────────────

    @app.route("/", methods=["GET"])
    def index():
        return jsonify({
            "service": "EEG Exam Workflow API",
            "version": "1.0.0",
            "status": "running",
            "endpoints": {
                "stages": "/api/workflow/stages",
                "resolve": "/api/access/resolve",
                "gate": "/api/forms/gate",
                "progress": "/api/exams/<exam_id>/progress",
                "actions": "/api/user/actions",
                "health": "/health",
            },
        })

    @app.route("/health", methods=["GET"])
    def health():
        from sqlalchemy import text as sa_text

        checks = {"database": False}
        try:
            if engine:
                with engine.connect() as conn:
                    conn.execute(sa_text("SELECT 1"))
                checks["database"] = True
        except Exception as e:
            print(f"[WARN] Health check: database unreachable: {e}", file=sys.stderr)

        all_healthy = all(checks.values())
        return jsonify({
            "status": "healthy" if all_healthy else "unhealthy",
            "checks": checks,
        }), 200 if all_healthy else 503

    # ── Workflow ─────────────────────────────────────────────────────

    @app.route("/api/workflow/stages", methods=["GET"])
    def get_stages():
        return jsonify({
            "success": True,
            "stages": [
                {"id": step_id, "label": label, "index": stage_index(step_id)}
                for step_id, label in WORKFLOW_STEPS
            ],
        }), 200

    @app.route("/api/exams/<exam_id>/progress", methods=["GET"])
    @token_required
    def get_progress(exam_id):
        try:
            exam = load_exam(engine, exam_id)
        except UnknownStageError as e:
            return jsonify({"error": "Exam has an invalid stage", "details": str(e)}), 422
        except Exception as e:
            print(f"[ERROR] Progress lookup error: {e}", file=sys.stderr)
            traceback.print_exc()
            return jsonify({"error": "Internal server error"}), 500

        if exam is None:
            return jsonify({"error": f"Exam {exam_id} not found"}), 404

        steps = render(WORKFLOW_STEPS, exam.stage)
        return jsonify({
            "success": True,
            "exam_id": exam.id,
            "stage": exam.stage.value,
            "steps": [
                {"id": s.id, "label": s.label, "status": s.status, "clickable": s.clickable}
                for s in steps
            ],
        }), 200

    # ── Access ───────────────────────────────────────────────────────

    @app.route("/api/access/resolve", methods=["POST"])
    @token_required
    def resolve_access():
        if not request.is_json:
            return jsonify({"error": "Content-Type must be application/json"}), 400

        data = request.json or {}
        if not isinstance(data, dict):
            return jsonify({"error": "Request body must be a JSON object"}), 400
        purpose = data.get("purpose")
        permission = data.get("required_permission") or required_permission_for(purpose)

        try:
            exam = _exam_for_request(data)
        except UnknownStageError as e:
            return jsonify({"error": "Exam has an invalid stage", "details": str(e)}), 422
        except Exception as e:
            print(f"[ERROR] Exam lookup error: {e}", file=sys.stderr)
            traceback.print_exc()
            return jsonify({"error": "Internal server error"}), 500

        decision = resolve(request.current_user, exam, purpose, permission)
        return jsonify({"success": True, "decision": _decision_to_dict(decision)}), 200

    @app.route("/api/forms/gate", methods=["POST"])
    @token_required
    def gate():
        if not request.is_json:
            return jsonify({"error": "Content-Type must be application/json"}), 400

        data = request.json or {}
        if not isinstance(data, dict):
            return jsonify({"error": "Request body must be a JSON object"}), 400
        if "tree" not in data:
            return jsonify({"error": "tree is required"}), 400

        purpose = data.get("purpose")
        try:
            exam = _exam_for_request(data)
        except UnknownStageError as e:
            return jsonify({"error": "Exam has an invalid stage", "details": str(e)}), 422
        except Exception as e:
            print(f"[ERROR] Exam lookup error: {e}", file=sys.stderr)
            traceback.print_exc()
            return jsonify({"error": "Internal server error"}), 500

        tree = node_from_dict(data["tree"])
        result = gate_form(
            request.current_user, exam, purpose, tree,
            required_permission=data.get("required_permission"),
        )
        return jsonify({
            "success": True,
            "decision": _decision_to_dict(result.decision),
            "tree": node_to_dict(result.tree) if result.tree is not None else None,
            "fields": field_names(result.tree) if result.tree is not None else [],
        }), 200

    @app.route("/api/user/actions", methods=["GET"])
    @token_required
    def get_actions():
        user = request.current_user
        return jsonify({
            "success": True,
            "role": user.role_label,
            "actions": [
                {"purpose": p.value, "required_stage": required_stage(p).value}
                for p in allowed_purposes(user)
            ],
        }), 200

    # ── Error handlers ───────────────────────────────────────────────

    @app.errorhandler(404)
    def not_found(e):
        return jsonify({"error": "Endpoint not found", "message": str(e)}), 404

    @app.errorhandler(405)
    def method_not_allowed(e):
        return jsonify({"error": "Method not allowed", "message": str(e)}), 405

    @app.errorhandler(500)
    def internal_error(e):
        return jsonify({"error": "Internal server error", "message": str(e)}), 500
