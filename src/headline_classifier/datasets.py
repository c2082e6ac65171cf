"""Loading labeled headline datasets and splitting them for evaluation.

Supports CSV/TSV and JSON-lines files (e.g. the HuffPost News Category
dataset). Column names are matched case-insensitively.
"""

from __future__ import annotations

import logging
import random
from collections import defaultdict
from pathlib import Path
from typing import NamedTuple, Optional, Sequence

import pandas as pd

from .errors import DatasetError
from .model import Category

logger = logging.getLogger(__name__)

TEXT_COLUMNS: tuple[str, ...] = ("title", "headline", "text", "body")
LABEL_COLUMNS: tuple[str, ...] = ("category", "label", "class")


class LabeledDocument(NamedTuple):
    """A raw text with its category label."""

    text: str
    label: Category


Split = tuple[list[LabeledDocument], list[LabeledDocument]]


def _pick_column(columns: list[str], requested: Optional[str], candidates: Sequence[str], kind: str) -> str:
    if requested is not None:
        if requested.lower() not in columns:
            raise DatasetError(f"{kind} column {requested!r} not found. Available: {columns}")
        return requested.lower()
    for candidate in candidates:
        if candidate in columns:
            return candidate
    raise DatasetError(
        f"Could not find a {kind} column (tried {', '.join(candidates)}). Available: {columns}"
    )


def _read_frame(path: Path) -> pd.DataFrame:
    suffix = path.suffix.lower()
    if suffix not in (".csv", ".tsv", ".json", ".jsonl"):
        raise DatasetError(
            f"Unsupported dataset format: {suffix!r}. Supported: .csv, .tsv, .json, .jsonl"
        )
    try:
        if suffix == ".csv":
            return pd.read_csv(path, encoding="utf-8-sig")
        if suffix == ".tsv":
            return pd.read_csv(path, sep="\t", encoding="utf-8-sig")
        return pd.read_json(path, lines=True)
    # ParserError, EmptyDataError and UnicodeDecodeError are all ValueErrors
    except ValueError as exc:
        raise DatasetError(f"Could not read {path.name}: {exc}") from exc


def _label_values(labels: pd.Series) -> list[Category]:
    # A blank label turns an integer column into float64; dropna keeps that dtype
    if pd.api.types.is_float_dtype(labels) and (labels % 1 == 0).all():
        labels = labels.astype("int64")
    # .tolist() converts numpy scalars to plain int/str
    return labels.tolist()


def load_dataset(
    path: str | Path,
    text_column: Optional[str] = None,
    label_column: Optional[str] = None,
) -> list[LabeledDocument]:
    """Read a labeled dataset file.

    Args:
        path: ``.csv``, ``.tsv``, ``.json`` or ``.jsonl`` file.
        text_column: Column holding the text (auto-detected if None).
        label_column: Column holding the label (auto-detected if None).

    Returns:
        Labeled documents in file order. Rows missing text or label are
        dropped. Integer label columns stay ``int`` even when some rows had
        no label; everything else keeps the type pandas infers.

    Raises:
        FileNotFoundError: If the file does not exist.
        DatasetError: On an unsupported extension, a file pandas cannot
            parse or decode, or missing columns.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    df = _read_frame(path)
    df.columns = [str(c).strip().lower() for c in df.columns]
    columns = list(df.columns)
    text_col = _pick_column(columns, text_column, TEXT_COLUMNS, "text")
    label_col = _pick_column(columns, label_column, LABEL_COLUMNS, "label")

    before = len(df)
    df = df.dropna(subset=[text_col, label_col])
    if len(df) < before:
        logger.warning("Dropped %d rows with missing text or label", before - len(df))

    texts = df[text_col].astype(str).tolist()
    labels = _label_values(df[label_col])
    logger.info("Loaded %d documents from %s", len(texts), path)
    return [LabeledDocument(text, label) for text, label in zip(texts, labels)]


def _shuffled_groups(items: Sequence[LabeledDocument], rng: random.Random) -> list[list[int]]:
    """Indices grouped by label (first-seen order), each group shuffled."""
    groups: dict[Category, list[int]] = defaultdict(list)
    for idx, doc in enumerate(items):
        groups[doc.label].append(idx)
    for indices in groups.values():
        rng.shuffle(indices)
    return list(groups.values())


def _partition(items: Sequence[LabeledDocument], test_idx: set[int]) -> Split:
    train = [d for i, d in enumerate(items) if i not in test_idx]
    test = [d for i, d in enumerate(items) if i in test_idx]
    return train, test


def train_test_split(
    examples: Sequence[tuple[str, Category]],
    test_size: float = 0.2,
    seed: int = 42,
    stratify: bool = True,
) -> Split:
    """Split labeled documents into train and test sets.

    With ``stratify`` each category is split separately and always keeps at
    least one training document, so every category can be trained.

    Raises:
        ValueError: If ``test_size`` is not in [0, 1).
    """
    if not 0 <= test_size < 1:
        raise ValueError(f"test_size must be in [0, 1), got {test_size}")

    rng = random.Random(seed)
    items = [LabeledDocument(text, label) for text, label in examples]

    if not stratify:
        indices = list(range(len(items)))
        rng.shuffle(indices)
        return _partition(items, set(indices[:int(round(test_size * len(items)))]))

    test_idx: set[int] = set()
    for indices in _shuffled_groups(items, rng):
        n_test = min(int(round(test_size * len(indices))), len(indices) - 1)
        test_idx.update(indices[:n_test])
    return _partition(items, test_idx)


def k_fold_split(
    examples: Sequence[tuple[str, Category]],
    k: int = 5,
    seed: int = 42,
) -> list[Split]:
    """Stratified k-fold partitions of labeled documents.

    Each category's shuffled documents are dealt across the folds in turn,
    so every fold sees roughly the category mix of the full set and every
    document is tested exactly once.

    Raises:
        ValueError: If ``k`` is less than 2.
    """
    if k < 2:
        raise ValueError(f"k must be at least 2, got {k}")

    items = [LabeledDocument(text, label) for text, label in examples]
    groups = _shuffled_groups(items, random.Random(seed))
    return [
        _partition(items, {idx for indices in groups for idx in indices[fold::k]})
        for fold in range(k)
    ]
