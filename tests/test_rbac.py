"""
Unit tests for RBAC – role and permission membership checks.
"""

from eeg_workflow.models import User
from eeg_workflow.rbac import (
    can_access,
    has_all_permissions,
    has_any_permission,
    has_permission,
    has_role,
)


# ── Helpers ──────────────────────────────────────────────────────────

def make_user(role="technicien", **caps):
    return User(role_label=role, capabilities=caps)


# ── Tests: has_permission ────────────────────────────────────────────

def test_has_permission_granted():
    assert has_permission(make_user(observer=True), "observer") is True


def test_has_permission_requires_exact_true():
    user = User(role_label="medecin", capabilities={"observer": "yes", "analyser": 1})
    assert has_permission(user, "observer") is False
    assert has_permission(user, "analyser") is False


def test_has_permission_absent_user_or_map():
    assert has_permission(None, "observer") is False
    assert has_permission(User(role_label="medecin", capabilities=None), "observer") is False
    assert has_permission(User(role_label="medecin", capabilities=["observer"]), "observer") is False


def test_has_permission_missing_key():
    assert has_permission(make_user(observer=True), "interpreter") is False


def test_has_permission_unhashable_name_is_false():
    assert has_permission(make_user(observer=True), ["observer"]) is False


# ── Tests: has_role ──────────────────────────────────────────────────

def test_has_role_single_label():
    assert has_role(make_user("medecin"), "medecin") is True
    assert has_role(make_user("medecin"), "technicien") is False


def test_has_role_many_labels():
    assert has_role(make_user("infirmier"), ["medecin", "infirmier"]) is True
    assert has_role(make_user("accueil"), {"medecin", "infirmier"}) is False


def test_has_role_absent_inputs():
    assert has_role(None, "medecin") is False
    assert has_role(make_user("medecin"), None) is False
    assert has_role(User(role_label=None, capabilities={}), ["medecin"]) is False


def test_has_role_non_iterable_roles_is_false():
    assert has_role(make_user("medecin"), 12) is False


# ── Tests: multi-permission helpers ──────────────────────────────────

def test_has_any_and_all_permissions():
    user = make_user(observer=True, analyser=True)
    assert has_any_permission(user, ["interpreter", "analyser"]) is True
    assert has_all_permissions(user, ["observer", "analyser"]) is True
    assert has_all_permissions(user, ["observer", "interpreter"]) is False
    assert has_all_permissions(user, []) is False


# ── Tests: can_access ────────────────────────────────────────────────

def test_can_access_role_only():
    assert can_access(make_user("accueil"), ["accueil", "administrateur"]) is True
    assert can_access(make_user("technicien"), ["accueil"]) is False


def test_can_access_role_and_any_permission():
    user = make_user("medecin", interpreter=True)
    assert can_access(user, "medecin", ["observer", "interpreter"]) is True
    assert can_access(user, "medecin", ["observer", "analyser"]) is False


def test_can_access_require_all():
    user = make_user("medecin", interpreter=True)
    assert can_access(user, "medecin", ["observer", "interpreter"], require_all=True) is False


def test_can_access_single_permission_string():
    assert can_access(make_user("technicien", enregistrer=True), "technicien", "enregistrer") is True


def test_can_access_no_user():
    assert can_access(None, "medecin") is False
