"""
Centralised configuration constants and environment helpers.
"""

import os
import sys

from dotenv import load_dotenv

load_dotenv()

# ── Roles (coarse job labels) ────────────────────────────────────────
ROLES = {
    "ADMINISTRATEUR": "administrateur",
    "MEDECIN": "medecin",
    "INFIRMIER": "infirmier",
    "TECHNICIEN": "technicien",
    "ACCUEIL": "accueil",
}

# ── Operator-identity fields (removed, not disabled, when locked) ────
SENSITIVE_FIELDS = frozenset({
    "technicienExaminateur", "technicienObservateur", "technicienEnregistreur",
    "analysteNom", "medecinNom", "numeroInscriptionOrdre",
    "utilisateurNom", "utilisateurEmail", "utilisateurRole", "utilisateurId",
})

# Appended to the style classes of every locked field.
DISABLED_STYLE_MARKER = "cursor-not-allowed opacity-75"

# ── Access banner messages ───────────────────────────────────────────
MESSAGE_INSUFFICIENT_PERMISSION = "insufficient permission"
MESSAGE_WRONG_STAGE = "wrong stage, expected {stage}"

# ── Exam workflow ────────────────────────────────────────────────────
# Legacy spellings found in stored exams.
STAGE_ALIASES = {
    "Interpretation": "Interprétation",
    "Terminer": "Terminé",
    "Création": "Creation",
}

WORKFLOW_STEPS = [
    ("Creation", "Création"),
    ("Observation", "Observation"),
    ("Enregistrement", "Enregistrement"),
    ("Analyse", "Analyse"),
    ("Interprétation", "Interprétation"),
    ("Terminé", "Terminé"),
]

# Permission a user needs to fill in each stage form.
PURPOSE_PERMISSIONS = {
    "observation": "observer",
    "enregistrement": "enregistrer",
    "analyse": "analyser",
    "interpretation": "interpreter",
}
DEFAULT_REQUIRED_PERMISSION = "admin"

# ── API server ───────────────────────────────────────────────────────
SECRET_KEY = os.getenv("JWT_SECRET_KEY", "dev-secret-key-change-in-production")
TOKEN_ALGORITHM = "HS256"
TOKEN_EXPIRY_HOURS = 24
EXAMS_TABLE = "examens"


def get_env(name: str) -> str:
    """Return an environment variable or exit with an error message."""
    value = os.getenv(name)
    if not value:
        print(f"ERROR: env var {name} is not set", file=sys.stderr)
        sys.exit(1)
    return value
