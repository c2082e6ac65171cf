"""Tests for the click command-line interface."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from headline_classifier.classifier import HeadlineClassifier
from headline_classifier.cli import main


@pytest.fixture
def runner(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> CliRunner:
    # Keep stray .env files and variables out of the CLI's settings
    monkeypatch.chdir(tmp_path)
    for name in ("LANGUAGE", "STEMMER", "WORKERS", "LOG_LEVEL"):
        monkeypatch.delenv(f"HEADLINE_CLASSIFIER_{name}", raising=False)
    return CliRunner()


@pytest.fixture
def model_file(runner: CliRunner, headlines_csv: Path, tmp_path: Path) -> Path:
    path = tmp_path / "model.json"
    result = runner.invoke(main, ["train", str(headlines_csv), "--output", str(path)])
    assert result.exit_code == 0, result.output
    return path


class TestTrainCommand:
    def test_writes_model(self, model_file: Path):
        loaded = HeadlineClassifier.load(model_file)
        assert loaded.classes == ["business", "sports", "politics"]

    def test_reports_categories(self, runner: CliRunner, headlines_csv: Path, tmp_path: Path):
        result = runner.invoke(
            main, ["train", str(headlines_csv), "-o", str(tmp_path / "m.json"), "--workers", "2"]
        )
        assert result.exit_code == 0, result.output
        assert "business" in result.output
        assert "politics" in result.output

    def test_normalizer_options_saved(self, runner: CliRunner, headlines_csv: Path, tmp_path: Path):
        path = tmp_path / "m.json"
        result = runner.invoke(
            main, ["train", str(headlines_csv), "-o", str(path), "--stemmer", "porter"]
        )
        assert result.exit_code == 0, result.output
        assert HeadlineClassifier.load(path).normalizer.stemmer_name == "porter"

    def test_stemmer_from_environment(
        self, runner: CliRunner, headlines_csv: Path, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ):
        monkeypatch.setenv("HEADLINE_CLASSIFIER_STEMMER", "none")
        path = tmp_path / "m.json"
        result = runner.invoke(main, ["train", str(headlines_csv), "-o", str(path)])
        assert result.exit_code == 0, result.output
        assert HeadlineClassifier.load(path).normalizer.stemmer_name == "none"

    def test_bad_column_fails(self, runner: CliRunner, headlines_csv: Path, tmp_path: Path):
        result = runner.invoke(
            main,
            ["train", str(headlines_csv), "-o", str(tmp_path / "m.json"), "--label-column", "topic"],
        )
        assert result.exit_code == 1
        assert "Error" in result.output

    def test_undecodable_dataset_reports_error(self, runner: CliRunner, tmp_path: Path):
        dataset = tmp_path / "news.csv"
        dataset.write_bytes(b"title,category\nteam \xff wins,a\nstock falls,b\n")
        result = runner.invoke(main, ["train", str(dataset), "-o", str(tmp_path / "m.json")])
        assert result.exit_code == 1
        assert "Error:" in result.output
        assert not (tmp_path / "m.json").exists()

    def test_integer_labels_with_blank_row(self, runner: CliRunner, tmp_path: Path):
        dataset = tmp_path / "news.csv"
        dataset.write_text(
            "title,category\nteam wins,1\nstock falls,\nstock rises,2\nteam loses,1\n",
            encoding="utf-8",
        )
        path = tmp_path / "m.json"
        result = runner.invoke(main, ["train", str(dataset), "-o", str(path)])
        assert result.exit_code == 0, result.output
        assert HeadlineClassifier.load(path).classes == [1, 2]

    def test_invalid_workers_env_fails(
        self, runner: CliRunner, headlines_csv: Path, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ):
        monkeypatch.setenv("HEADLINE_CLASSIFIER_WORKERS", "lots")
        result = runner.invoke(main, ["train", str(headlines_csv), "-o", str(tmp_path / "m.json")])
        assert result.exit_code == 1


class TestClassifyCommand:
    def test_json_output(self, runner: CliRunner, model_file: Path):
        result = runner.invoke(
            main,
            ["classify", str(model_file), "Team wins the final", "", "--output", "json"],
        )
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert [d["text"] for d in data] == ["Team wins the final", ""]
        assert data[1]["degenerate"] is True
        labels = {"business", "sports", "politics"}
        assert all(d["predicted_class"] in labels for d in data)

    def test_rich_output(self, runner: CliRunner, model_file: Path):
        result = runner.invoke(main, ["classify", str(model_file), "the of and"])
        assert result.exit_code == 0, result.output
        assert "prior only" in result.output

    def test_invalid_model_file(self, runner: CliRunner, tmp_path: Path):
        path = tmp_path / "bad.json"
        path.write_text("{}", encoding="utf-8")
        result = runner.invoke(main, ["classify", str(path), "text"])
        assert result.exit_code == 1
        assert "does not contain a saved model" in result.output

    def test_requires_text(self, runner: CliRunner, model_file: Path):
        result = runner.invoke(main, ["classify", str(model_file)])
        assert result.exit_code != 0


class TestEvaluateCommand:
    def test_holdout_json(self, runner: CliRunner, headlines_csv: Path):
        result = runner.invoke(
            main, ["evaluate", str(headlines_csv), "--test-size", "0.25", "--output", "json"]
        )
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert len(data) == 1
        assert sum(data[0]["support"].values()) == 3
        assert 0.0 <= data[0]["accuracy"] <= 1.0

    def test_cross_validation_json(self, runner: CliRunner, headlines_csv: Path):
        result = runner.invoke(
            main, ["evaluate", str(headlines_csv), "--folds", "2", "--output", "json"]
        )
        assert result.exit_code == 0, result.output
        assert len(json.loads(result.output)) == 2

    def test_rich_output(self, runner: CliRunner, headlines_csv: Path):
        result = runner.invoke(main, ["evaluate", str(headlines_csv), "--folds", "2"])
        assert result.exit_code == 0, result.output
        assert "Mean accuracy" in result.output
        assert "Confusion matrix" in result.output
