"""Tests for the Recommendation Translator."""

import pytest

from promo_governor.governor.translator import translate_recommendation
from promo_governor.models.governance import Governance
from promo_governor.models.patch import (
    EXPERIMENTS_FILE,
    PROMO_QUEUE_FILE,
    MutableState,
    TranslationKind,
)
from promo_governor.models.recommendation import Recommendation


def _state(queue=None, experiments=None) -> MutableState:
    return MutableState.model_validate({
        "promoQueue": {"week": "2026-W09", "slugs": queue or []},
        "experiments": experiments or [],
    })


def _rec(category: str, slug: str = "tool", **extra) -> Recommendation:
    return Recommendation.model_validate({"category": category, "slug": slug, **extra})


class TestReFeature:
    def test_adds_slug_to_queue(self):
        rec = _rec("re-feature", evidence={"proofEngagementScore": 42})
        result = translate_recommendation(rec, Governance(), _state(["a"]))

        assert result.kind == TranslationKind.PATCH
        assert result.patch.target_file == PROMO_QUEUE_FILE
        assert result.patch.apply == {"slugs": ["a", "tool"]}
        assert result.patch.description == "Add tool to promo queue (proof engagement: 42)"
        assert result.risk_note == "Promo queue now has 2/3 slots filled"

    def test_description_without_evidence(self):
        result = translate_recommendation(_rec("re-feature"), Governance(), _state())
        assert result.patch.description == "Add tool to promo queue (re-feature)"

    def test_object_entries_preserved(self):
        state = _state([{"slug": "a", "channels": ["mail"]}])
        result = translate_recommendation(_rec("re-feature"), Governance(), state)
        assert result.patch.apply["slugs"] == [{"slug": "a", "channels": ["mail"]}, "tool"]

    def test_frozen(self):
        result = translate_recommendation(
            _rec("re-feature"), Governance(decisions_frozen=True), _state()
        )
        assert result.kind == TranslationKind.FROZEN
        assert result.patch is None
        assert "decisionsFrozen" in result.note

    def test_already_queued(self):
        result = translate_recommendation(_rec("re-feature"), Governance(), _state(["tool"]))
        assert result.kind == TranslationKind.ADVISORY
        assert result.note == "Already in promo queue"

    def test_queue_full(self):
        result = translate_recommendation(
            _rec("re-feature"), Governance(max_promos_per_week=2), _state(["a", "b"])
        )
        assert result.kind == TranslationKind.ADVISORY
        assert result.note == "Promo queue full (2/2)"

    def test_unreadable_entries_carried_forward(self):
        entries = ["a", {"slug": "b", "channels": "mail"}, {"channels": ["x"]}]
        result = translate_recommendation(
            _rec("re-feature"), Governance(max_promos_per_week=5), _state(entries)
        )
        assert result.patch.apply["slugs"] == [*entries, "tool"]
        assert result.risk_note == "Promo queue now has 4/5 slots filled"


class TestGraduation:
    def setup_method(self):
        self.state = _state(experiments=[
            {"id": "exp-1", "status": "active", "slugs": ["tool"]},
            {"id": "exp-2", "status": "draft"},
            {"id": "exp-3", "status": "concluded"},
        ])

    def test_concludes_active_experiment(self):
        rec = _rec("experiment-graduation", slug="exp-1", evidence={"winnerKey": "bold"})
        result = translate_recommendation(rec, Governance(), self.state)

        assert result.kind == TranslationKind.PATCH
        assert result.patch.target_file == EXPERIMENTS_FILE
        statuses = [e["status"] for e in result.patch.apply["experiments"]]
        assert statuses == ["concluded", "draft", "concluded"]
        assert result.patch.description == "Graduate experiment exp-1 (winner: bold)"
        assert result.risk_note == "Experiment exp-1 will be marked concluded"

    def test_unknown_winner(self):
        rec = _rec("experiment-graduation", slug="exp-1")
        result = translate_recommendation(rec, Governance(), self.state)
        assert result.patch.description.endswith("(winner: unknown)")

    def test_frozen(self):
        rec = _rec("experiment-graduation", slug="exp-1")
        result = translate_recommendation(
            rec, Governance(experiments_frozen=True), self.state
        )
        assert result.kind == TranslationKind.FROZEN
        assert "experimentsFrozen" in result.note

    def test_not_found(self):
        rec = _rec("experiment-graduation", slug="exp-9")
        result = translate_recommendation(rec, Governance(), self.state)
        assert result.kind == TranslationKind.ADVISORY
        assert "not found" in result.note

    def test_already_concluded(self):
        rec = _rec("experiment-graduation", slug="exp-3")
        result = translate_recommendation(rec, Governance(), self.state)
        assert result.kind == TranslationKind.ADVISORY
        assert "already concluded" in result.note

    def test_draft_cannot_graduate(self):
        rec = _rec("experiment-graduation", slug="exp-2")
        result = translate_recommendation(rec, Governance(), self.state)
        assert result.kind == TranslationKind.ADVISORY
        assert "only active experiments" in result.note

    def test_other_experiments_unchanged(self):
        untouched = {"id": "exp-2", "status": "draft", "slug": "tool", "endedAt": None}
        state = _state(experiments=[
            {"id": "exp-1", "status": "active", "slugs": ["tool"], "owner": "ops"},
            untouched,
        ])
        rec = _rec("experiment-graduation", slug="exp-1")
        result = translate_recommendation(rec, Governance(), state)

        assert result.patch.apply["experiments"] == [
            {"id": "exp-1", "status": "concluded", "slugs": ["tool"], "owner": "ops"},
            untouched,
        ]

    def test_malformed_experiment_is_advisory(self):
        state = _state(experiments=[{"id": "exp-1", "status": "paused"}])
        rec = _rec("experiment-graduation", slug="exp-1")
        result = translate_recommendation(rec, Governance(), state)
        assert result.kind == TranslationKind.ADVISORY
        assert "malformed" in result.note


class TestAdvisoryCategories:
    @pytest.mark.parametrize("category", ["improve-proof", "stuck-submission", "lint-promotion"])
    def test_default_note(self, category):
        result = translate_recommendation(_rec(category), Governance(), _state())
        assert result.kind == TranslationKind.ADVISORY
        assert result.patch is None
        assert result.note

    def test_insight_used_as_note(self):
        rec = _rec("improve-proof", insight="Add a demo video")
        result = translate_recommendation(rec, Governance(), _state())
        assert result.note == "Add a demo video"

    def test_advisory_ignores_freeze(self):
        frozen = Governance(decisions_frozen=True, experiments_frozen=True)
        result = translate_recommendation(_rec("stuck-submission"), frozen, _state())
        assert result.kind == TranslationKind.ADVISORY

    def test_unknown_category_is_advisory(self):
        result = translate_recommendation(_rec("retire-slug"), Governance(), _state())
        assert result.kind == TranslationKind.ADVISORY
        assert result.note == 'Unknown category "retire-slug": advisory only'
