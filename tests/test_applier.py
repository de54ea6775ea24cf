"""Tests for the Patch Applier and patch validation."""

import json
from datetime import datetime, timezone

import pytest

from promo_governor.governor.applier import (
    apply_patches,
    build_audit_artifact,
    coalesce_patches,
    write_audit_artifact,
)
from promo_governor.governor.validation import (
    GovernanceViolationError,
    patch_violations,
)
from promo_governor.models.patch import Patch, PatchPlan, PlanNote
from promo_governor.store.documents import PATCH_AUDIT_OUTPUT, DocumentStore

GENERATED_AT = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def _patch(target: str, apply: dict, slug: str = "tool") -> Patch:
    return Patch(
        category="re-feature",
        slug=slug,
        target_file=target,
        description=f"Patch {slug}",
        apply=apply,
        risk_note="risk",
    )


@pytest.fixture
def store(tmp_path):
    return DocumentStore(tmp_path)


class CountingStore(DocumentStore):
    def __init__(self, data_dir):
        super().__init__(data_dir)
        self.writes = []

    def write(self, name, document):
        self.writes.append(name)
        return super().write(name, document)


class TestApplyPatches:
    def test_same_target_coalesced_into_one_write(self, tmp_path):
        store = CountingStore(tmp_path)
        store.write("promo-queue.json", {"week": "2026-W09", "slugs": ["a"]})
        store.writes.clear()

        patches = [
            _patch("promo-queue.json", {"slugs": ["a", "b"]}, "b"),
            _patch("promo-queue.json", {"slugs": ["a", "b", "c"]}, "c"),
        ]
        written = apply_patches(patches, store)

        assert written == ["promo-queue.json"]
        assert store.writes == ["promo-queue.json"]
        doc = store.read_raw("promo-queue.json")
        assert doc == {"week": "2026-W09", "slugs": ["a", "b", "c"]}

    def test_multiple_targets(self, store):
        patches = [
            _patch("promo-queue.json", {"slugs": ["a"]}),
            _patch("experiments.json", {"experiments": []}, "exp-1"),
        ]
        written = apply_patches(patches, store)
        assert sorted(written) == ["experiments.json", "promo-queue.json"]
        assert store.read_raw("experiments.json") == {"experiments": []}

    def test_governance_target_rejected_before_any_write(self, store):
        patches = [
            _patch("promo-queue.json", {"slugs": ["a"]}),
            _patch("governance.json", {"decisionsFrozen": True}),
        ]
        with pytest.raises(GovernanceViolationError):
            apply_patches(patches, store)
        assert not store.path_for("promo-queue.json").exists()
        assert not store.path_for("governance.json").exists()

    def test_all_violations_reported(self, store):
        patches = [
            _patch("governance.json", {"maxPromosPerWeek": 9}),
            _patch("promo-queue.json", {"schemaVersion": 2}),
            _patch("experiments.json", {"hardRules": []}),
            _patch("secrets.json", {"x": 1}),
        ]
        with pytest.raises(GovernanceViolationError) as exc_info:
            apply_patches(patches, store)
        assert len(exc_info.value.errors) == 4

    def test_non_object_document_replaced(self, store):
        store.write("promo-queue.json", ["legacy"])
        apply_patches([_patch("promo-queue.json", {"slugs": ["a"]})], store)
        assert store.read_raw("promo-queue.json") == {"slugs": ["a"]}

    def test_coalesce_preserves_order(self):
        patches = [
            _patch("promo-queue.json", {}, "a"),
            _patch("experiments.json", {}, "x"),
            _patch("promo-queue.json", {}, "b"),
        ]
        groups = coalesce_patches(patches)
        assert [p.slug for p in groups["promo-queue.json"]] == ["a", "b"]


class TestPatchViolations:
    def test_clean_patches(self):
        assert patch_violations([_patch("promo-queue.json", {"slugs": []})]) == []

    def test_governance_target(self):
        errors = patch_violations([_patch("governance.json", {})])
        assert "governance.json" in errors[0]


class TestAuditArtifact:
    def _plan(self):
        return PatchPlan(
            patches=[_patch("promo-queue.json", {"slugs": ["a"]})],
            advisory_notes=[PlanNote(category="improve-proof", slug="b", note="Improve it")],
            risk_notes=["risk"],
        )

    def test_artifact_carries_timestamp_and_hash(self):
        plan = self._plan()
        artifact = build_audit_artifact(plan, GENERATED_AT)
        assert artifact.generated_at == "2026-03-01T12:00:00+00:00"
        assert artifact.plan_hash == plan.fingerprint()
        assert artifact.patches == plan.patches

    def test_hash_ignores_timestamp(self):
        plan = self._plan()
        later = datetime(2027, 1, 1, tzinfo=timezone.utc)
        assert build_audit_artifact(plan, GENERATED_AT).plan_hash == \
            build_audit_artifact(plan, later).plan_hash

    def test_written_once_with_camel_case_keys(self, store):
        write_audit_artifact(self._plan(), store, GENERATED_AT)
        with open(store.path_for(PATCH_AUDIT_OUTPUT), encoding="utf-8") as fh:
            doc = json.load(fh)
        assert set(doc) == {
            "patches", "advisoryNotes", "riskNotes", "frozenActions",
            "generatedAt", "planHash",
        }
        assert doc["patches"][0]["targetFile"] == "promo-queue.json"
