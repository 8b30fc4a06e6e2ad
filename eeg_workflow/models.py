"""
Domain dataclasses used across the application.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Union


class Stage(str, Enum):
    """Exam lifecycle positions, in required order."""
    CREATION = "Creation"
    OBSERVATION = "Observation"
    ENREGISTREMENT = "Enregistrement"
    ANALYSE = "Analyse"
    INTERPRETATION = "Interprétation"
    TERMINE = "Terminé"


class FormPurpose(str, Enum):
    """Which stage form is being rendered."""
    OBSERVATION = "observation"
    ENREGISTREMENT = "enregistrement"
    ANALYSE = "analyse"
    INTERPRETATION = "interpretation"
    DEFAULT = "default"


class Visibility(str, Enum):
    EDITABLE = "editable"
    VISIBLE = "visible"    # shown but disabled
    HIDDEN = "hidden"


@dataclass(frozen=True)
class User:
    """The authenticated actor, as handed over by the auth service."""
    role_label: Optional[str]                 # "medecin", "technicien", ...
    capabilities: Optional[Dict[str, bool]]   # permission name -> granted
    user_id: Optional[str] = None
    display_name: Optional[str] = None


@dataclass(frozen=True)
class Exam:
    """Snapshot of one diagnostic case."""
    id: str
    stage: Stage
    patient_ref: Optional[str] = None
    observation: Optional[Dict[str, Any]] = None
    recording: Optional[Dict[str, Any]] = None
    analysis: Optional[Dict[str, Any]] = None
    interpretation: Optional[Dict[str, Any]] = None


@dataclass(frozen=True)
class FieldMeta:
    name: Optional[str]
    sensitive: bool = False


@dataclass(frozen=True)
class Leaf:
    """A form control. ``meta`` is None for decorative nodes."""
    meta: Optional[FieldMeta] = None
    disabled: bool = False
    classes: Tuple[str, ...] = ()
    payload: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Container:
    """Groups children; literal text children are plain strings."""
    children: Tuple[Union["Leaf", "Container", str], ...] = ()
    payload: Dict[str, Any] = field(default_factory=dict)


FormNode = Union[Leaf, Container]


@dataclass(frozen=True)
class AccessDecision:
    editable: bool
    correct_stage: bool
    authorized: bool
    required_stage: Stage
    message: Optional[str]


@dataclass(frozen=True)
class GatedForm:
    """Gate output: the transformed tree (None if the root was removed) and the decision."""
    tree: Optional[FormNode]
    decision: AccessDecision


@dataclass(frozen=True)
class StepStatus:
    id: str
    label: str
    status: str        # "completed", "active" or "future"
    clickable: bool
