"""
Patch Applier — materializes an approved plan.

Behavioral Contract:
- Validates every patch before touching disk; any violation aborts the run
- Groups patches by target document: one read, ordered shallow merges,
  one write per document
- Builds every merged document in memory before the first write
- Persists exactly one audit artifact; it alone carries a timestamp
"""

import logging
from datetime import datetime
from typing import Dict, List

from promo_governor.governor.validation import validate_patches
from promo_governor.models.patch import AuditArtifact, Patch, PatchPlan
from promo_governor.store.documents import PATCH_AUDIT_OUTPUT, DocumentStore

logger = logging.getLogger(__name__)


def coalesce_patches(patches: List[Patch]) -> Dict[str, List[Patch]]:
    """Group patches by target file, preserving list order within each group."""
    by_file: Dict[str, List[Patch]] = {}
    for p in patches:
        by_file.setdefault(p.target_file, []).append(p)
    return by_file


def merge_patches(current: dict, patches: List[Patch]) -> dict:
    merged = dict(current)
    for p in patches:
        merged.update(p.apply)
    return merged


def apply_patches(patches: List[Patch], store: DocumentStore) -> List[str]:
    """Apply patches to their target documents. Returns files written."""
    validate_patches(patches)

    staged = {}
    for target, group in coalesce_patches(patches).items():
        current = store.read_raw(target, default={})
        if not isinstance(current, dict):
            logger.warning("%s is not a JSON object, starting from empty", target)
            current = {}
        staged[target] = merge_patches(current, group)

    for target, document in staged.items():
        store.write(target, document)
    return list(staged)


def build_audit_artifact(plan: PatchPlan, generated_at: datetime) -> AuditArtifact:
    return AuditArtifact(
        generated_at=generated_at.isoformat(),
        plan_hash=plan.fingerprint(),
        **plan.model_dump(),
    )


def write_audit_artifact(
    plan: PatchPlan,
    store: DocumentStore,
    generated_at: datetime,
) -> AuditArtifact:
    artifact = build_audit_artifact(plan, generated_at)
    store.write(PATCH_AUDIT_OUTPUT, artifact.to_document())
    return artifact
