#!/usr/bin/env python3
"""
Generate development access tokens for each workflow role.
Tokens carry the role label and the capability table the API reads.
"""

from eeg_workflow.api.auth import generate_token
from eeg_workflow.config import ROLES
from eeg_workflow.models import User

# Capability tables typical of each role.
ROLE_CAPABILITIES = {
    ROLES["ADMINISTRATEUR"]: {
        "observer": True, "enregistrer": True, "analyser": True,
        "interpreter": True, "admin": True,
    },
    ROLES["MEDECIN"]: {"observer": True, "interpreter": True},
    ROLES["INFIRMIER"]: {"observer": True},
    ROLES["TECHNICIEN"]: {"enregistrer": True, "analyser": True},
    ROLES["ACCUEIL"]: {},
}


def generate_role_token(role: str, user_id: str = "dev", hours: int = 8) -> str:
    """Issue a token for a development user holding ``role``."""
    user = User(
        role_label=role,
        capabilities=dict(ROLE_CAPABILITIES.get(role, {})),
        user_id=f"{user_id}-{role}",
        display_name=f"Dev {role.capitalize()}",
    )
    return generate_token(user, expires_in_hours=hours)


if __name__ == "__main__":
    print("=" * 70)
    print("EEG Workflow Development Token Generator")
    print("=" * 70)
    print()

    for role in ROLES.values():
        caps = ", ".join(sorted(ROLE_CAPABILITIES.get(role, {}))) or "(none)"
        print(f"-- {role} [{caps}]")
        print(f"  {generate_role_token(role)}")
        print()

    print("=" * 70)
    print("Tokens are signed with JWT_SECRET_KEY and expire after 8 hours.")
    print("=" * 70)
