"""
Control Patch — human-initiated edits to governance and promo settings.

A control patch maps file name to fields, e.g.
{"governance.json": {"decisionsFrozen": true}}. It is the only route by
which governance.json changes, and it still cannot touch protected fields.
"""

import logging
from typing import Any, Callable, Dict, List

from pydantic import BaseModel

from promo_governor.governor.validation import GovernanceViolationError
from promo_governor.models.patch import PROTECTED_FIELDS
from promo_governor.store.documents import (
    EXPERIMENTS,
    GOVERNANCE,
    PROMO,
    PROMO_QUEUE,
    DocumentStore,
)

logger = logging.getLogger(__name__)

CONTROL_ALLOWED_FILES = (GOVERNANCE, PROMO, PROMO_QUEUE, EXPERIMENTS)


def _is_int(v: Any) -> bool:
    return isinstance(v, int) and not isinstance(v, bool)


def _is_number(v: Any) -> bool:
    return isinstance(v, (int, float)) and not isinstance(v, bool)


def _int_between(low: int, high: int) -> Callable[[Any], bool]:
    return lambda v: _is_int(v) and low <= v <= high


_GOVERNANCE_VALIDATORS: Dict[str, Callable[[Any], bool]] = {
    "decisionsFrozen": lambda v: isinstance(v, bool),
    "experimentsFrozen": lambda v: isinstance(v, bool),
    "maxPromosPerWeek": _int_between(1, 20),
    "cooldownDaysPerSlug": _int_between(1, 90),
    "cooldownDaysPerPartner": _int_between(1, 90),
    "minCoverageScore": lambda v: _is_number(v) and 0 <= v <= 100,
    "minExperimentDataThreshold": _int_between(1, 1000),
}

_PROMO_VALIDATORS: Dict[str, Callable[[Any], bool]] = {
    "enabled": lambda v: isinstance(v, bool),
    "learningMode": lambda v: v in ("off", "shadow", "active"),
}

FILE_VALIDATORS = {
    GOVERNANCE: _GOVERNANCE_VALIDATORS,
    PROMO: _PROMO_VALIDATORS,
}


def _freeze_note(subject: str) -> Callable[[Any], str]:
    return lambda v: (
        f"{subject} will NOT update until unfrozen" if v is True
        else f"{subject} will resume updating"
    )


_RISK_NOTES: Dict[str, Dict[str, Callable[[Any], str]]] = {
    GOVERNANCE: {
        "decisionsFrozen": _freeze_note("Decisions"),
        "experimentsFrozen": _freeze_note("Experiments"),
        "maxPromosPerWeek": lambda v: f"Max promos per week changed to {v}: affects budget allocation",
        "cooldownDaysPerSlug": lambda v: f"Slug cooldown changed to {v} days",
        "cooldownDaysPerPartner": lambda v: f"Partner cooldown changed to {v} days",
        "minCoverageScore": lambda v: f"Coverage threshold changed to {v}",
        "minExperimentDataThreshold": lambda v: f"Experiment data threshold changed to {v}",
    },
    PROMO: {
        "enabled": lambda v: (
            "Promotion ENABLED: outreach will run" if v
            else "Promotion DISABLED: no outreach"
        ),
        "learningMode": lambda v: f'Learning mode set to "{v}"',
    },
}


class ControlPatchResult(BaseModel):
    applied: List[str] = []
    risk_notes: List[str] = []


def control_patch_violations(patch: Any) -> List[str]:
    if not isinstance(patch, dict):
        return ["Patch must be a JSON object"]

    errors = []
    for file, fields in patch.items():
        if file not in CONTROL_ALLOWED_FILES:
            errors.append(
                f'File "{file}" is not in the allowed list: '
                f"{', '.join(CONTROL_ALLOWED_FILES)}"
            )
            continue
        if not isinstance(fields, dict):
            errors.append(f'Fields for "{file}" must be an object')
            continue
        validators = FILE_VALIDATORS.get(file, {})
        for field, value in fields.items():
            if field in PROTECTED_FIELDS:
                errors.append(
                    f'Field "{field}" in "{file}" is protected and cannot be patched'
                )
                continue
            check = validators.get(field)
            if check is not None and not check(value):
                errors.append(f'Invalid value for "{file}".{field}: {value!r}')
    return errors


def validate_control_patch(patch: Any) -> None:
    errors = control_patch_violations(patch)
    if errors:
        raise GovernanceViolationError(errors)


def apply_control_patch(patch: Dict[str, dict], store: DocumentStore) -> ControlPatchResult:
    """Validate, then merge each file's fields with one read and one write."""
    validate_control_patch(patch)

    staged = {}
    risk_notes = []
    for file, fields in patch.items():
        current = store.read_raw(file, default={})
        if not isinstance(current, dict):
            current = {}
        staged[file] = {**current, **fields}

        notes = _RISK_NOTES.get(file, {})
        for field, value in fields.items():
            if field in notes:
                risk_notes.append(notes[field](value))

    for file, document in staged.items():
        store.write(file, document)
    for note in risk_notes:
        logger.info("risk: %s", note)

    return ControlPatchResult(applied=list(staged), risk_notes=risk_notes)
