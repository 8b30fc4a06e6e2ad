"""
Form access gate – walk a form tree and lock, or remove, fields the caller
may not edit.
"""

from dataclasses import replace
from typing import Iterable, Optional, Tuple, Union

from eeg_workflow.config import DISABLED_STYLE_MARKER, SENSITIVE_FIELDS
from eeg_workflow.models import (
    Container,
    Exam,
    FieldMeta,
    FormNode,
    FormPurpose,
    GatedForm,
    Leaf,
    User,
    Visibility,
)
from eeg_workflow.forms import REMOVED, rebuild_tree
from eeg_workflow.policy import field_visibility, required_permission_for, resolve


class FormAccessGate:
    """
    Applies one editable/locked verdict to every field of a form tree.

    Fields are sensitive when their FieldMeta says so or their name is in
    ``sensitive_fields``. Locked sensitive fields are dropped from the
    output; other locked fields are disabled and get ``disabled_marker``
    added to their style classes. The input tree is never modified.
    """

    def __init__(
        self,
        sensitive_fields: Iterable[str] = SENSITIVE_FIELDS,
        disabled_marker: str = DISABLED_STYLE_MARKER,
    ):
        self.sensitive_fields = frozenset(sensitive_fields)
        self.disabled_classes: Tuple[str, ...] = tuple(disabled_marker.split())

    def apply(self, tree: FormNode, editable: bool) -> Optional[FormNode]:
        """Return the gated copy of ``tree``, or None when the root itself is removed."""
        gated = self._walk(tree, editable)
        return None if gated is REMOVED else gated

    def is_sensitive(self, meta: FieldMeta) -> bool:
        return meta.sensitive or meta.name in self.sensitive_fields

    # ── Tree walk ────────────────────────────────────────────────────

    def _walk(self, node, editable: bool):
        # Stack-based, so tree depth is not bounded by the recursion limit.
        return rebuild_tree(
            node,
            lambda n: _as_tuple(n.children) if isinstance(n, Container) else None,
            lambda n, children: Container(children=tuple(children), payload=_copy(n.payload)),
            lambda n: self._gate_leaf(n, editable) if isinstance(n, Leaf) else n,
        )

    def _gate_leaf(self, leaf: Leaf, editable: bool):
        meta = leaf.meta if isinstance(leaf.meta, FieldMeta) else None
        if meta is None or not isinstance(meta.name, str) or not meta.name:
            return replace(leaf, payload=_copy(leaf.payload))

        effective = FieldMeta(name=meta.name, sensitive=self.is_sensitive(meta))
        visibility = field_visibility(effective, editable)
        if visibility is Visibility.HIDDEN:
            return REMOVED

        classes = _as_tuple(leaf.classes)
        if visibility is Visibility.VISIBLE:
            classes += tuple(c for c in self.disabled_classes if c not in classes)

        return replace(
            leaf,
            disabled=leaf.disabled or not editable,
            classes=classes,
            payload=_copy(leaf.payload),
        )


def _as_tuple(children) -> tuple:
    return tuple(children) if isinstance(children, (list, tuple)) else ()


def _copy(payload) -> dict:
    return dict(payload) if isinstance(payload, dict) else {}


_default_gate = FormAccessGate()


def apply(tree: FormNode, editable: bool) -> Optional[FormNode]:
    """Gate ``tree`` with the configured sensitive-field list."""
    return _default_gate.apply(tree, editable)


def gate_form(
    user: Optional[User],
    exam: Optional[Exam],
    purpose: Union[FormPurpose, str, None],
    tree: FormNode,
    required_permission: Optional[str] = None,
    gate: Optional[FormAccessGate] = None,
) -> GatedForm:
    """Resolve access for one form and return the gated tree with the decision."""
    permission = required_permission or required_permission_for(purpose)
    decision = resolve(user, exam, purpose, permission)
    gated = (gate or _default_gate).apply(tree, decision.editable)
    return GatedForm(tree=gated, decision=decision)
