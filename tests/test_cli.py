"""Tests for the promo-governor command line."""

import json

import pytest

from promo_governor.cli import main
from promo_governor.store.documents import DocumentStore


@pytest.fixture
def data_dir(tmp_path):
    d = tmp_path / "data"
    s = DocumentStore(d)
    s.write("governance.json", {"schemaVersion": 1})
    s.write("promo-queue.json", {"slugs": ["a", "b"]})
    s.write("recommendations.json", {"recommendations": [
        {"category": "re-feature", "slug": "c"},
    ]})
    return d


@pytest.fixture(autouse=True)
def no_env_config(monkeypatch):
    monkeypatch.delenv("KIT_CONFIG", raising=False)


class TestDecisionsCommand:
    def test_dry_run(self, data_dir, capsys):
        assert main(["--data-dir", str(data_dir), "decisions", "--dry-run"]) == 0
        out = capsys.readouterr().out
        assert "[dry-run] Decisions: 2" in out
        assert "a: promote (20)" in out
        assert not (data_dir / "promo-decisions.json").exists()

    def test_live_run_writes_report(self, data_dir):
        assert main(["--data-dir", str(data_dir), "decisions"]) == 0
        doc = json.loads((data_dir / "promo-decisions.json").read_text(encoding="utf-8"))
        assert len(doc["decisions"]) == 2
        assert "generatedAt" in doc


class TestPatchCommand:
    def test_dry_run(self, data_dir, capsys):
        assert main(["--data-dir", str(data_dir), "patch", "--dry-run"]) == 0
        out = capsys.readouterr().out
        assert "[dry-run] Patches: 1" in out
        assert not (data_dir / "recommendation-patch.json").exists()

    def test_max_patches_flag(self, data_dir, capsys):
        assert main(["--data-dir", str(data_dir), "patch", "--dry-run", "--max-patches", "0"]) == 0
        out = capsys.readouterr().out
        assert "[dry-run] Patches: 0" in out
        assert "[dry-run] Advisory: 1" in out

    def test_live_run(self, data_dir, capsys):
        assert main(["--data-dir", str(data_dir), "patch"]) == 0
        assert "Applied patches to: promo-queue.json" in capsys.readouterr().out
        queue = json.loads((data_dir / "promo-queue.json").read_text(encoding="utf-8"))
        assert queue["slugs"] == ["a", "b", "c"]

    def test_config_file_locates_data_dir(self, tmp_path, data_dir, capsys):
        config = tmp_path / "kit.config.json"
        config.write_text(json.dumps({"paths": {"dataDir": "data"}}), encoding="utf-8")
        assert main(["--config", str(config), "patch", "--dry-run"]) == 0
        assert "[dry-run] Patches: 1" in capsys.readouterr().out

    def test_config_from_environment(self, tmp_path, data_dir, capsys, monkeypatch):
        config = tmp_path / "kit.config.json"
        config.write_text(json.dumps({
            "paths": {"dataDir": "data"},
            "guardrails": {"maxDataPatchesPerRun": 0},
        }), encoding="utf-8")
        monkeypatch.setenv("KIT_CONFIG", str(config))
        assert main(["patch", "--dry-run"]) == 0
        assert "[dry-run] Patches: 0" in capsys.readouterr().out


class TestControlPatchCommand:
    def test_applies(self, data_dir, capsys):
        patch = json.dumps({"governance.json": {"decisionsFrozen": True}})
        assert main(["--data-dir", str(data_dir), "control-patch", patch]) == 0
        out = capsys.readouterr().out
        assert "Applied patch to: governance.json" in out
        assert "Decisions will NOT update until unfrozen" in out

    def test_invalid_json(self, data_dir, capsys):
        assert main(["--data-dir", str(data_dir), "control-patch", "{nope"]) == 1
        assert "Invalid JSON" in capsys.readouterr().err

    def test_validation_errors(self, data_dir, capsys):
        patch = json.dumps({"governance.json": {"hardRules": [], "maxPromosPerWeek": 99}})
        assert main(["--data-dir", str(data_dir), "control-patch", patch]) == 1
        err = capsys.readouterr().err
        assert "Validation errors:" in err
        assert err.count("  - ") == 2
