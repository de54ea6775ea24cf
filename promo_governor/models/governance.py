"""Governance — the single human-edited configuration shared by every run."""

from typing import Any, List

from pydantic import Field

from promo_governor.models.base import DocumentModel


class Governance(DocumentModel):
    """
    Freeze flags and caps read by the scoring and patch layers.

    Never mutated by automated patches. Only a human control patch may
    change it, and even then schema_version and hard_rules stay protected.
    """

    schema_version: int = 1
    decisions_frozen: bool = False
    experiments_frozen: bool = False
    max_promos_per_week: int = 3
    cooldown_days_per_slug: int = 14
    min_experiment_data_threshold: int = 10
    hard_rules: List[Any] = Field(default_factory=list)
