"""
Promo Governor API — FastAPI endpoints over one data directory.

Exposes the batch pipeline for:
- Governance inspection
- Decision preview and runs
- Recommendation patch-plan preview and application
- Human control patches
"""

from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from fastapi import FastAPI, HTTPException

from promo_governor.governor.control import apply_control_patch
from promo_governor.governor.validation import GovernanceViolationError
from promo_governor.models.config import KitConfig
from promo_governor.pipeline.runner import (
    load_governance,
    run_decisions,
    run_recommendation_patch,
)
from promo_governor.store.documents import DocumentStore


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


# --- Application Factory ---

def create_app(
    store: Optional[DocumentStore] = None,
    config: Optional[KitConfig] = None,
    clock: Optional[Callable[[], datetime]] = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""

    app = FastAPI(
        title="Promo Governor API",
        description="Promotion decisions and governed recommendation patches",
        version="0.1.0",
    )

    cfg = config or KitConfig()
    ds = store or DocumentStore(cfg.paths.data_dir)
    now = clock or _utc_now

    app.state.store = ds
    app.state.config = cfg

    # === GOVERNANCE ===

    @app.get("/governance")
    def get_governance():
        """Current governance document (defaults filled in)."""
        return load_governance(ds).to_document()

    @app.post("/control-patch")
    def post_control_patch(patch: Dict[str, Any]):
        """Validate and apply a human control patch."""
        try:
            result = apply_control_patch(patch, ds)
        except GovernanceViolationError as exc:
            raise HTTPException(422, {"errors": exc.errors})
        return result.model_dump(mode="json")

    # === DECISIONS ===

    @app.get("/decisions/preview")
    def preview_decisions():
        """Compute decisions without writing."""
        report = run_decisions(ds, cfg, now(), dry_run=True)
        return report.to_document()

    @app.post("/decisions/run")
    def run_decision_pass():
        """Compute decisions and replace promo-decisions.json."""
        report = run_decisions(ds, cfg, now())
        return report.to_document()

    # === PATCH PLAN ===

    @app.get("/patch-plan/preview")
    def preview_patch_plan(max_patches: Optional[int] = None):
        """Build the patch plan without writing."""
        result = run_recommendation_patch(
            ds, cfg, now(), dry_run=True, max_patches=max_patches
        )
        return result.artifact.to_document()

    @app.post("/patch-plan/apply")
    def apply_patch_plan(max_patches: Optional[int] = None):
        """Apply the patch plan and persist the audit artifact."""
        try:
            result = run_recommendation_patch(
                ds, cfg, now(), max_patches=max_patches
            )
        except GovernanceViolationError as exc:
            raise HTTPException(422, {"errors": exc.errors})
        return {
            "files_written": result.files_written,
            "artifact": result.artifact.to_document(),
        }

    return app
