"""
Form tree construction and serialization.

Renderers describe a form as nested dicts (``{"children": [...]}`` for
groups, ``{"name": ...}`` for controls). These helpers turn that into
Leaf/Container nodes and back. Building never raises: shapes that are not
recognised become nameless leaves, which the gate passes through.

Trees can be arbitrarily deep, so every walk here uses an explicit stack
instead of recursion.
"""

from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional

from eeg_workflow.config import SENSITIVE_FIELDS
from eeg_workflow.models import Container, FieldMeta, Leaf

_LEAF_KEYS = {"name", "sensitive", "disabled", "className"}

# Returned by a leaf converter to drop the node from the rebuilt tree.
REMOVED = object()
_END = object()


def rebuild_tree(
    root: Any,
    children_of: Callable[[Any], Optional[list]],
    make_group: Callable[[Any, list], Any],
    convert_leaf: Callable[[Any], Any],
) -> Any:
    """
    Post-order rebuild of a tree without recursion.

    ``children_of`` returns a node's child list, or None for leaves.
    ``make_group`` builds a group from the original node and its converted
    children; ``convert_leaf`` converts everything else and may return
    REMOVED. Sibling order is kept.
    """
    root_children = children_of(root)
    if root_children is None:
        return convert_leaf(root)

    stack = [(root, iter(root_children), [])]
    while True:
        node, pending, done = stack[-1]
        child = next(pending, _END)

        if child is _END:
            stack.pop()
            built = make_group(node, done)
            if not stack:
                return built
            if built is not REMOVED:
                stack[-1][2].append(built)
            continue

        grandchildren = children_of(child)
        if grandchildren is not None:
            stack.append((child, iter(grandchildren), []))
            continue

        converted = convert_leaf(child)
        if converted is not REMOVED:
            done.append(converted)


# ── Dicts -> nodes ───────────────────────────────────────────────────

def node_from_dict(data: Any, sensitive_fields: Iterable[str] = SENSITIVE_FIELDS):
    """Build a form node (or literal text) from a JSON-like value."""
    sensitive_fields = frozenset(sensitive_fields)
    return rebuild_tree(
        data,
        _dict_children,
        lambda data, children: Container(
            children=tuple(children),
            payload={k: v for k, v in data.items() if k != "children"},
        ),
        lambda data: _build_leaf(data, sensitive_fields),
    )


def _dict_children(data: Any) -> Optional[list]:
    if not isinstance(data, dict):
        return None
    children = data.get("children")
    # A single child may be given bare, as React does.
    if isinstance(children, (str, dict)):
        return [children]
    if isinstance(children, list):
        return children
    return None


def _build_leaf(data: Any, sensitive_fields: frozenset):
    if isinstance(data, str):
        return data

    if not isinstance(data, dict):
        return Leaf(payload={"raw": data})

    name = data.get("name")
    meta = None
    if isinstance(name, str) and name:
        meta = FieldMeta(
            name=name,
            sensitive=data.get("sensitive") is True or name in sensitive_fields,
        )

    class_name = data.get("className")
    classes = tuple(class_name.split()) if isinstance(class_name, str) else ()

    return Leaf(
        meta=meta,
        disabled=data.get("disabled") is True,
        classes=classes,
        payload={k: v for k, v in data.items() if k not in _LEAF_KEYS},
    )


# ── Nodes -> dicts ───────────────────────────────────────────────────

def node_to_dict(node) -> Any:
    """Inverse of node_from_dict, for handing a gated tree back to a renderer."""
    return rebuild_tree(node, _node_children, _group_to_dict, _leaf_to_dict)


def _node_children(node) -> Optional[list]:
    if isinstance(node, Container):
        return list(node.children) if isinstance(node.children, (list, tuple)) else []
    return None


def _group_to_dict(node: Container, children: list) -> Dict[str, Any]:
    out = dict(node.payload) if isinstance(node.payload, dict) else {}
    out["children"] = children
    return out


def _leaf_to_dict(node) -> Any:
    if not isinstance(node, Leaf):
        return node

    out: Dict[str, Any] = dict(node.payload) if isinstance(node.payload, dict) else {}
    if _field_name(node):
        out["name"] = node.meta.name
        if node.meta.sensitive:
            out["sensitive"] = True
    if node.disabled:
        out["disabled"] = True
    if node.classes:
        out["className"] = " ".join(node.classes)
    return out


# ── Field listing ────────────────────────────────────────────────────

def iter_fields(node) -> Iterator[Leaf]:
    """Yield named leaves depth-first, in sibling order."""
    stack = [iter((node,))]
    while stack:
        current = next(stack[-1], _END)
        if current is _END:
            stack.pop()
            continue
        children = _node_children(current)
        if children is not None:
            stack.append(iter(children))
        elif _field_name(current):
            yield current


def _field_name(node) -> Optional[str]:
    if isinstance(node, Leaf) and isinstance(node.meta, FieldMeta) and isinstance(node.meta.name, str):
        return node.meta.name or None
    return None


def field_names(node) -> List[str]:
    return [leaf.meta.name for leaf in iter_fields(node)]
