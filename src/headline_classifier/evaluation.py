"""Scoring predictions against held-out labels.

Every metric is derived from one confusion matrix whose rows and columns
follow the model's category order, the same order the classifier uses to
break ties.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional, Sequence

from .classifier import HeadlineClassifier
from .datasets import k_fold_split
from .model import Category
from .preprocessing import TextNormalizer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClassScores:
    """Precision, recall and F1 for one category."""

    precision: float
    recall: float
    f1: float
    support: int


@dataclass(frozen=True)
class ClassificationMetrics:
    """A confusion matrix and the scores read off it.

    Attributes:
        classes: Row and column order of the matrix.
        confusion_matrix: ``{true: {predicted: count}}`` covering every pair
            of ``classes``.
    """

    classes: list[Category] = field(default_factory=list)
    confusion_matrix: dict[Category, dict[Category, int]] = field(default_factory=dict)

    @property
    def total(self) -> int:
        return sum(self.support.values())

    @property
    def support(self) -> dict[Category, int]:
        """Number of true examples per class."""
        return {c: sum(self.confusion_matrix[c].values()) for c in self.classes}

    @property
    def accuracy(self) -> float:
        if not self.total:
            return 0.0
        return sum(self.confusion_matrix[c][c] for c in self.classes) / self.total

    @property
    def per_class(self) -> dict[Category, ClassScores]:
        scores = {}
        for cls in self.classes:
            hits = self.confusion_matrix[cls][cls]
            predicted = sum(row[cls] for row in self.confusion_matrix.values())
            actual = sum(self.confusion_matrix[cls].values())
            precision = hits / predicted if predicted else 0.0
            recall = hits / actual if actual else 0.0
            f1 = 2 * precision * recall / (precision + recall) if precision + recall else 0.0
            scores[cls] = ClassScores(precision, recall, f1, actual)
        return scores

    @property
    def macro_f1(self) -> float:
        scores = list(self.per_class.values())
        return sum(s.f1 for s in scores) / len(scores) if scores else 0.0

    @property
    def weighted_f1(self) -> float:
        if not self.total:
            return 0.0
        return sum(s.f1 * s.support for s in self.per_class.values()) / self.total

    def to_dict(self) -> dict:
        """JSON-friendly view with labels converted to strings."""
        return {
            "accuracy": round(self.accuracy, 4),
            "macro_f1": round(self.macro_f1, 4),
            "weighted_f1": round(self.weighted_f1, 4),
            "per_class": {
                str(cls): {
                    "precision": round(s.precision, 4),
                    "recall": round(s.recall, 4),
                    "f1": round(s.f1, 4),
                }
                for cls, s in self.per_class.items()
            },
            "confusion_matrix": {
                str(true): {str(pred): n for pred, n in row.items()}
                for true, row in self.confusion_matrix.items()
            },
            "support": {str(cls): n for cls, n in self.support.items()},
        }

    def summary(self) -> str:
        """Plain-text report: headline numbers, then one row per class."""
        width = max([len("Class")] + [len(str(c)) for c in self.classes])
        rows = [
            f"Accuracy: {self.accuracy:.2%} of {self.total}",
            f"Macro F1: {self.macro_f1:.4f}  Weighted F1: {self.weighted_f1:.4f}",
            "",
            f"{'Class':<{width}}  Precision  Recall      F1  Support",
        ]
        for cls, s in self.per_class.items():
            rows.append(
                f"{str(cls):<{width}}  {s.precision:9.4f}  {s.recall:6.4f}  {s.f1:6.4f}  {s.support:7d}"
            )
        return "\n".join(rows)


def compute_metrics(
    y_true: Sequence[Category],
    y_pred: Sequence[Category],
    labels: Optional[Sequence[Category]] = None,
) -> ClassificationMetrics:
    """Tally predictions into a :class:`ClassificationMetrics`.

    Args:
        y_true: Gold labels.
        y_pred: Predicted labels, aligned with ``y_true``.
        labels: Matrix order, usually ``model.labels``. Labels seen in the
            data but not listed are appended in first-seen order.

    Raises:
        ValueError: If the sequences differ in length.
    """
    if len(y_true) != len(y_pred):
        raise ValueError("y_true and y_pred must have the same length")

    classes = list(dict.fromkeys([*(labels or ()), *y_true, *y_pred]))
    matrix = {true: dict.fromkeys(classes, 0) for true in classes}
    for true, pred in zip(y_true, y_pred):
        matrix[true][pred] += 1
    return ClassificationMetrics(classes=classes, confusion_matrix=matrix)


def cross_validate(
    examples: Sequence[tuple[str, Category]],
    k: int = 5,
    seed: int = 42,
    normalizer_kwargs: Optional[dict] = None,
) -> list[ClassificationMetrics]:
    """Run stratified k-fold cross-validation.

    Every fold trains on the categories declared by the full example set, so
    each category needs at least two documents to appear in every training
    split.

    Returns:
        One :class:`ClassificationMetrics` per non-empty fold, with matrix
        rows in model order.
    """
    examples = list(examples)
    categories = list(dict.fromkeys(label for _, label in examples))

    results: list[ClassificationMetrics] = []
    for fold, (train, test) in enumerate(k_fold_split(examples, k=k, seed=seed), 1):
        if not test:
            logger.debug("Fold %d/%d has no test documents, skipping", fold, k)
            continue
        classifier = HeadlineClassifier(normalizer=TextNormalizer(**(normalizer_kwargs or {})))
        model = classifier.train(train, categories=categories)
        predictions = classifier.predict_batch(doc.text for doc in test)
        results.append(compute_metrics([doc.label for doc in test], predictions, model.labels))
        logger.info("Fold %d/%d accuracy %.4f", fold, k, results[-1].accuracy)

    return results
