"""
Password strength policy.

A password is accepted when it contains at least one uppercase letter, one
lowercase letter, one digit and one special character.  There is no length
rule.  Every unmet requirement is reported, always in the order the
requirements are declared in :class:`Requirement`.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Tuple

from pydantic import BaseModel


class Requirement(str, Enum):
    UPPERCASE = "uppercase"
    LOWERCASE = "lowercase"
    NUMBER = "number"
    SPECIAL_CHARACTER = "special_character"


SPECIAL_CHARACTERS = "!@#$%^&*()_+-=[]{};':\"\\|,.<>/?"

_CHECKS = (
    (Requirement.UPPERCASE, re.compile(r"[A-Z]")),
    (Requirement.LOWERCASE, re.compile(r"[a-z]")),
    (Requirement.NUMBER, re.compile(r"[0-9]")),
    (Requirement.SPECIAL_CHARACTER, re.compile("[" + re.escape(SPECIAL_CHARACTERS) + "]")),
)


class PolicyResult(BaseModel):
    accepted: bool
    missing_requirements: Tuple[Requirement, ...] = ()

    model_config = {"frozen": True}


def evaluate(password: str) -> PolicyResult:
    """Classify ``password`` against the policy."""
    missing = tuple(req for req, pattern in _CHECKS if not pattern.search(password))
    return PolicyResult(accepted=not missing, missing_requirements=missing)
