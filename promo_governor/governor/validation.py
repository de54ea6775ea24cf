"""Checks run before any governed write. Every violation is collected."""

from typing import List

from promo_governor.models.patch import (
    ALLOWED_TARGET_FILES,
    GOVERNANCE_FILE,
    PROTECTED_FIELDS,
    Patch,
)


class GovernanceViolationError(ValueError):
    """Raised when a write would break a governance rule."""

    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors))


def patch_violations(patches: List[Patch]) -> List[str]:
    errors = []
    for p in patches:
        if p.target_file == GOVERNANCE_FILE:
            errors.append(
                f"Patch for {p.slug!r} targets {GOVERNANCE_FILE}, "
                f"which automated patches may not modify"
            )
            continue
        if p.target_file not in ALLOWED_TARGET_FILES:
            errors.append(
                f"Patch for {p.slug!r} targets {p.target_file!r}, not in the "
                f"allowed list: {', '.join(sorted(ALLOWED_TARGET_FILES))}"
            )
            continue
        for field in p.apply:
            if field in PROTECTED_FIELDS:
                errors.append(
                    f"Patch for {p.slug!r} sets protected field "
                    f"{field!r} in {p.target_file}"
                )
    return errors


def validate_patches(patches: List[Patch]) -> None:
    """Raise GovernanceViolationError listing all violations, if any."""
    errors = patch_violations(patches)
    if errors:
        raise GovernanceViolationError(errors)
