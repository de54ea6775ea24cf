"""Experiments — A/B tests attached to promotion candidates."""

from enum import Enum
from typing import Dict, List, Optional

from pydantic import Field, model_validator

from promo_governor.models.base import DocumentModel


class InvalidTransitionError(ValueError):
    """Raised for a lifecycle change outside draft -> active -> concluded."""
    pass


class ExperimentStatus(str, Enum):
    DRAFT = "draft"
    ACTIVE = "active"
    CONCLUDED = "concluded"


_TRANSITIONS: Dict[ExperimentStatus, ExperimentStatus] = {
    ExperimentStatus.DRAFT: ExperimentStatus.ACTIVE,
    ExperimentStatus.ACTIVE: ExperimentStatus.CONCLUDED,
}


def can_transition(current: ExperimentStatus, target: ExperimentStatus) -> bool:
    return _TRANSITIONS.get(current) == target


class ExperimentArm(DocumentModel):
    """One arm (control or variant) with its observed reply rate."""

    key: str
    entries: int
    replied: int
    rate: float


class Experiment(DocumentModel):
    id: str
    status: ExperimentStatus = ExperimentStatus.DRAFT
    slugs: List[str] = Field(default_factory=list)
    slug: Optional[str] = None              # Single-slug form

    @property
    def is_active(self) -> bool:
        return self.status == ExperimentStatus.ACTIVE

    def attached_slugs(self) -> List[str]:
        if self.slugs:
            return list(self.slugs)
        return [self.slug] if self.slug else []

    def transition(self, target: ExperimentStatus) -> "Experiment":
        """Return a copy in the target state, or raise InvalidTransitionError."""
        if not can_transition(self.status, target):
            raise InvalidTransitionError(
                f"Experiment {self.id}: cannot move from "
                f"{self.status.value} to {target.value}"
            )
        return self.model_copy(update={"status": target})


class ExperimentRoster(DocumentModel):
    """experiments.json. Accepts {experiments: [...]} or a bare list."""

    experiments: List[Experiment] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _wrap_bare_list(cls, data):
        if isinstance(data, list):
            return {"experiments": data}
        return data

    def get(self, experiment_id: str) -> Optional[Experiment]:
        return next((e for e in self.experiments if e.id == experiment_id), None)

    def active_for(self, slug: str) -> List[Experiment]:
        """Active experiments attached to slug, in roster order."""
        return [
            e for e in self.experiments
            if e.is_active and slug in e.attached_slugs()
        ]
