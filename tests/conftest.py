"""Shared test fixtures for headline-classifier tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from headline_classifier.model import NaiveBayesModel, train_model
from headline_classifier.preprocessing import TextNormalizer

# Token counts after normalization:
#   sports:   team=2 win=2 match=1 cup=1   (total 6)
#   business: stock=2 win=1 market=1 team=1 (total 5)
# "team" and "win" are the only tokens shared by both categories.
SMALL_EXAMPLES = [
    ("Team win match", "sports"),
    ("Team win cup", "sports"),
    ("Stock win market", "business"),
    ("Team stock", "business"),
]

HEADLINES = [
    ("Stocks rally as markets cheer strong earnings report", "business"),
    ("Oil prices climb while stocks slip on rate worries", "business"),
    ("Tech company reports record quarterly earnings", "business"),
    ("Central bank holds rates steady as markets wait", "business"),
    ("Local team wins championship after dramatic final", "sports"),
    ("Star striker scores twice as team wins derby", "sports"),
    ("Coach praises team after record winning season", "sports"),
    ("Injury forces champion out of final tournament", "sports"),
    ("Senate passes budget bill after long debate", "politics"),
    ("Governor wins reelection in tight race", "politics"),
    ("Lawmakers debate new budget as deadline nears", "politics"),
    ("President signs record spending bill into law", "politics"),
]


@pytest.fixture
def normalizer() -> TextNormalizer:
    """Default English normalizer."""
    return TextNormalizer()


@pytest.fixture
def small_examples() -> list[tuple[str, str]]:
    return list(SMALL_EXAMPLES)


@pytest.fixture
def small_model(small_examples, normalizer) -> NaiveBayesModel:
    """Two-category model with hand-checkable likelihoods."""
    return train_model(small_examples, normalizer=normalizer)


@pytest.fixture
def headlines() -> list[tuple[str, str]]:
    """Twelve headlines, four per category."""
    return list(HEADLINES)


@pytest.fixture
def headlines_csv(tmp_path: Path, headlines) -> Path:
    """CSV dataset file with ``title`` and ``category`` columns."""
    file = tmp_path / "headlines.csv"
    lines = ["title,category"]
    for text, label in headlines:
        lines.append(f'"{text}",{label}')
    file.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return file
