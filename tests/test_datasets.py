"""Tests for dataset loading and train/test splitting."""

from __future__ import annotations

import json
from collections import Counter
from pathlib import Path

import pytest

from headline_classifier.datasets import LabeledDocument, k_fold_split, load_dataset, train_test_split
from headline_classifier.errors import DatasetError


class TestLoadDataset:
    def test_csv_autodetects_columns(self, headlines_csv: Path, headlines):
        docs = load_dataset(headlines_csv)
        assert len(docs) == len(headlines)
        assert docs[0] == LabeledDocument(*headlines[0])

    def test_jsonl(self, tmp_path: Path):
        path = tmp_path / "news.jsonl"
        rows = [
            {"headline": "Stocks rally", "category": "BUSINESS", "link": "x"},
            {"headline": "Team wins", "category": "SPORTS", "link": "y"},
        ]
        path.write_text("\n".join(json.dumps(r) for r in rows), encoding="utf-8")
        docs = load_dataset(path)
        assert [d.label for d in docs] == ["BUSINESS", "SPORTS"]
        assert docs[1].text == "Team wins"

    def test_tsv_with_explicit_columns(self, tmp_path: Path):
        path = tmp_path / "news.tsv"
        path.write_text("Headline\tTopic\nStocks rally\t0\nTeam wins\t1\n", encoding="utf-8")
        docs = load_dataset(path, text_column="headline", label_column="Topic")
        assert docs == [LabeledDocument("Stocks rally", 0), LabeledDocument("Team wins", 1)]
        assert all(type(d.label) is int for d in docs)

    def test_rows_with_missing_values_dropped(self, tmp_path: Path):
        path = tmp_path / "news.csv"
        path.write_text("title,label\nStocks rally,biz\n,biz\nTeam wins,\n", encoding="utf-8")
        assert load_dataset(path) == [LabeledDocument("Stocks rally", "biz")]

    def test_integer_labels_survive_blank_label(self, tmp_path: Path):
        path = tmp_path / "news.csv"
        path.write_text(
            "title,category\nteam wins,1\nstock falls,\nstock rises,2\nteam loses,1\n",
            encoding="utf-8",
        )
        docs = load_dataset(path)
        assert [d.label for d in docs] == [1, 2, 1]
        assert all(type(d.label) is int for d in docs)

    def test_fractional_labels_stay_float(self, tmp_path: Path):
        path = tmp_path / "news.csv"
        path.write_text("title,category\nteam wins,1.5\nstock falls,\n", encoding="utf-8")
        assert load_dataset(path) == [LabeledDocument("team wins", 1.5)]

    def test_undecodable_bytes(self, tmp_path: Path):
        path = tmp_path / "news.csv"
        path.write_bytes(b"title,category\nteam \xff wins,a\nstock falls,b\n")
        with pytest.raises(DatasetError, match="news.csv"):
            load_dataset(path)

    def test_malformed_json_lines(self, tmp_path: Path):
        path = tmp_path / "news.jsonl"
        path.write_text('{"headline": "Team wins", "category": "SPORTS"}\nnot json\n', encoding="utf-8")
        with pytest.raises(DatasetError):
            load_dataset(path)

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            load_dataset(tmp_path / "nope.csv")

    def test_unsupported_extension(self, tmp_path: Path):
        path = tmp_path / "news.xlsx"
        path.write_text("x", encoding="utf-8")
        with pytest.raises(DatasetError, match="Unsupported"):
            load_dataset(path)

    def test_missing_text_column(self, tmp_path: Path):
        path = tmp_path / "news.csv"
        path.write_text("summary,category\nfoo,bar\n", encoding="utf-8")
        with pytest.raises(DatasetError, match="text column"):
            load_dataset(path)

    def test_requested_column_not_found(self, headlines_csv: Path):
        with pytest.raises(DatasetError, match="'topic'"):
            load_dataset(headlines_csv, label_column="topic")


class TestTrainTestSplit:
    def test_sizes(self, headlines):
        train, test = train_test_split(headlines, test_size=0.25, seed=0)
        assert len(train) == 9
        assert len(test) == 3

    def test_stratified_keeps_every_category_in_train(self):
        examples = [("a", "x"), ("b", "x"), ("c", "x"), ("d", "y")]
        train, test = train_test_split(examples, test_size=0.5)
        assert {d.label for d in train} == {"x", "y"}
        assert Counter(d.label for d in test)["y"] == 0

    def test_partition(self, headlines):
        train, test = train_test_split(headlines, test_size=0.5, seed=3)
        assert sorted(train + test) == sorted(LabeledDocument(*h) for h in headlines)

    def test_deterministic(self, headlines):
        assert train_test_split(headlines, seed=5) == train_test_split(headlines, seed=5)

    def test_unstratified(self, headlines):
        train, test = train_test_split(headlines, test_size=0.5, stratify=False)
        assert len(train) == len(test) == 6

    def test_zero_test_size(self, headlines):
        train, test = train_test_split(headlines, test_size=0.0)
        assert len(train) == len(headlines)
        assert test == []

    @pytest.mark.parametrize("size", [-0.1, 1.0, 1.5])
    def test_invalid_size(self, headlines, size):
        with pytest.raises(ValueError, match="test_size"):
            train_test_split(headlines, test_size=size)


class TestKFoldSplit:
    def test_every_document_tested_once(self):
        examples = [(f"doc {i}", "a") for i in range(6)] + [(f"doc {i}", "b") for i in range(6, 10)]
        folds = k_fold_split(examples, k=3, seed=1)
        tested = sorted(doc.text for _, test in folds for doc in test)
        assert tested == sorted(text for text, _ in examples)

    def test_folds_partition_the_data(self, headlines):
        for train, test in k_fold_split(headlines, k=4):
            assert sorted(train + test) == sorted(LabeledDocument(*h) for h in headlines)

    def test_folds_are_stratified(self):
        examples = [(f"a{i}", "a") for i in range(5)] + [(f"b{i}", "b") for i in range(5)]
        for _, test in k_fold_split(examples, k=5):
            assert sorted(doc.label for doc in test) == ["a", "b"]

    def test_deterministic_seed(self, headlines):
        assert k_fold_split(headlines, k=3, seed=7) == k_fold_split(headlines, k=3, seed=7)

    def test_k_too_small(self, headlines):
        with pytest.raises(ValueError, match="at least 2"):
            k_fold_split(headlines, k=1)
