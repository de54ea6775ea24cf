"""Patch plan — governed, auditable mutations to target documents."""

import hashlib
import json
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import Field, field_validator

from promo_governor.models.base import DocumentModel

PROMO_QUEUE_FILE = "promo-queue.json"
EXPERIMENTS_FILE = "experiments.json"
GOVERNANCE_FILE = "governance.json"

# Documents a recommendation patch may target. Governance is never one of them.
ALLOWED_TARGET_FILES = frozenset({PROMO_QUEUE_FILE, EXPERIMENTS_FILE})
PROTECTED_FIELDS = frozenset({"schemaVersion", "hardRules"})


class TranslationKind(str, Enum):
    PATCH = "patch"
    ADVISORY = "advisory"
    FROZEN = "frozen"


class Patch(DocumentModel):
    """One shallow merge into exactly one target document."""

    category: str
    slug: str
    target_file: str
    description: str
    apply: dict
    risk_note: str


class PlanNote(DocumentModel):
    category: str
    slug: str
    note: str


class Translation(DocumentModel):
    """Translator verdict for a single recommendation."""

    kind: TranslationKind
    note: str
    patch: Optional[Patch] = None
    risk_note: Optional[str] = None


class MutableState(DocumentModel):
    """
    Working copies of every document a patch may target.

    Held as the raw JSON read from disk, so a patch rebuilt from them keeps
    entries and fields the typed models would reject or normalize.
    """

    promo_queue: Dict[str, Any] = Field(default_factory=dict)
    experiments: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("promo_queue", mode="before")
    @classmethod
    def _queue_object(cls, v):
        return v if isinstance(v, dict) else {}

    @field_validator("experiments", mode="before")
    @classmethod
    def _roster_object(cls, v):
        if isinstance(v, list):
            return {"experiments": v}
        return v if isinstance(v, dict) else {}

    def queue_entries(self) -> List[Any]:
        slugs = self.promo_queue.get("slugs")
        return list(slugs) if isinstance(slugs, list) else []

    def queued_slug_ids(self) -> List[str]:
        ids = []
        for entry in self.queue_entries():
            if isinstance(entry, str):
                ids.append(entry)
            elif isinstance(entry, dict) and isinstance(entry.get("slug"), str):
                ids.append(entry["slug"])
        return ids

    def experiment_entries(self) -> List[Any]:
        entries = self.experiments.get("experiments")
        return list(entries) if isinstance(entries, list) else []

    def with_patch(self, patch: Patch) -> "MutableState":
        """Return a new state with the patch folded in. self is untouched."""
        if patch.target_file == PROMO_QUEUE_FILE:
            return self.model_copy(update={"promo_queue": {**self.promo_queue, **patch.apply}})
        if patch.target_file == EXPERIMENTS_FILE:
            return self.model_copy(update={"experiments": {**self.experiments, **patch.apply}})
        return self


class PatchPlan(DocumentModel):
    """
    Complete output of one plan-building pass.

    Contains no timestamp: identical inputs must give an identical plan.
    """

    patches: List[Patch] = Field(default_factory=list)
    advisory_notes: List[PlanNote] = Field(default_factory=list)
    risk_notes: List[str] = Field(default_factory=list)
    frozen_actions: List[PlanNote] = Field(default_factory=list)

    def fingerprint(self) -> str:
        """SHA-256 over the canonical JSON form of the plan."""
        payload = json.dumps(self.to_document(), sort_keys=True).encode()
        return hashlib.sha256(payload).hexdigest()


class AuditArtifact(PatchPlan):
    """recommendation-patch.json. The only place a timestamp appears."""

    generated_at: str
    plan_hash: str
