"""Posterior scoring, prediction, and the high-level classifier API.

Scoring follows one rule that matters more than anything else here: a query
token only counts as evidence if *every* category's likelihood table knows
it. A token missing from even one table is dropped for all categories, so no
category is penalized merely for lacking vocabulary coverage. The filter is
computed once per query.

Scores are a plain running product seeded at the prior::

    score[c] = prior[c] * likelihood[c][t1] * likelihood[c][t2] * ...

Long queries can underflow every score to ``0.0``; the tie-break (first
category in model order) then decides. A query with no surviving tokens is
scored on priors alone and returns the highest-prior category.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional, Sequence

from .errors import ModelFormatError, NotTrainedError
from .model import Category, NaiveBayesModel, train_model
from .preprocessing import TextNormalizer, default_normalizer

MODEL_FORMAT_VERSION = "1.0"


# ---------------------------------------------------------------------------
# Core scoring
# ---------------------------------------------------------------------------


def shared_vocabulary(model: NaiveBayesModel, tokens: Iterable[str]) -> frozenset[str]:
    """Distinct query tokens present in every category's likelihood table."""
    return frozenset(
        token for token in set(tokens)
        if all(token in entry.likelihoods for entry in model)
    )


def score_categories(model: NaiveBayesModel, tokens: Sequence[str]) -> dict[Category, float]:
    """Compute the unnormalized posterior score of each category.

    Each occurrence of a surviving token multiplies in its likelihood.

    Returns:
        ``{label: score}`` in model order.
    """
    surviving = shared_vocabulary(model, tokens)
    return _product_scores(model, [t for t in tokens if t in surviving])


def _product_scores(model: NaiveBayesModel, evidence: Sequence[str]) -> dict[Category, float]:
    """Prior times the likelihood of every evidence token, per category."""
    scores: dict[Category, float] = {}
    for entry in model:
        score = entry.prior
        for token in evidence:
            score *= entry.likelihoods[token]
        scores[entry.label] = score
    return scores


def _argmax(scores: dict[Category, float]) -> Category:
    """First key holding the strictly greatest value."""
    best_label = None
    best_score = None
    for label, score in scores.items():
        if best_score is None or score > best_score:
            best_label, best_score = label, score
    return best_label


def classify(
    model: NaiveBayesModel,
    document: str,
    normalizer: Optional[TextNormalizer] = None,
) -> Category:
    """Predict the category of a raw document.

    Args:
        model: Trained model.
        document: Raw text.
        normalizer: Must match the one used for training (the shared
            default English pipeline if None).

    Returns:
        The label with the highest score; ties go to the earliest category.
    """
    normalizer = normalizer or default_normalizer()
    return _argmax(score_categories(model, normalizer.normalize(document)))


# ---------------------------------------------------------------------------
# High-level API
# ---------------------------------------------------------------------------


@dataclass
class ClassificationResult:
    """Outcome of classifying a single document.

    Attributes:
        predicted_class: Arg-max label.
        scores: Raw posterior scores per label, in model order.
        evidence: Query tokens that passed the shared-vocabulary filter.
        degenerate: True when no token survived and priors alone decided.
    """

    predicted_class: Category
    scores: dict[Category, float]
    evidence: list[str] = field(default_factory=list)
    degenerate: bool = False

    @property
    def probabilities(self) -> dict[Category, float]:
        """Scores rescaled to sum to 1 (all zero if every score underflowed)."""
        total = sum(self.scores.values())
        if total <= 0:
            return {label: 0.0 for label in self.scores}
        return {label: score / total for label, score in self.scores.items()}

    @property
    def confidence(self) -> float:
        return self.probabilities[self.predicted_class]

    def to_dict(self) -> dict:
        return {
            "predicted_class": self.predicted_class,
            "confidence": round(self.confidence, 4),
            "degenerate": self.degenerate,
            "evidence": self.evidence,
            "probabilities": {
                str(k): round(v, 4) for k, v in sorted(
                    self.probabilities.items(),
                    key=lambda x: x[1],
                    reverse=True,
                )
            },
        }


class HeadlineClassifier:
    """Train/predict wrapper pairing a normalizer with a trained model.

    Example::

        classifier = HeadlineClassifier()
        classifier.train([("Stocks rally on earnings", "business"),
                          ("Team wins the final", "sports")])

        result = classifier.classify("Earnings lift stocks")
        print(result.predicted_class)  # "business"

        classifier.save("model.json")
        loaded = HeadlineClassifier.load("model.json")

    Args:
        normalizer: Tokenizer used for both training and inference.
        workers: Threads used to build per-category vocabularies.
    """

    def __init__(
        self,
        normalizer: Optional[TextNormalizer] = None,
        workers: int = 1,
    ) -> None:
        self.normalizer = normalizer or default_normalizer()
        self.workers = workers
        self._model: Optional[NaiveBayesModel] = None

    @property
    def is_trained(self) -> bool:
        return self._model is not None

    @property
    def model(self) -> NaiveBayesModel:
        """The trained model.

        Raises:
            NotTrainedError: If neither ``train()`` nor ``load()`` ran.
        """
        if self._model is None:
            raise NotTrainedError("Classifier not trained. Call train() first.")
        return self._model

    @property
    def classes(self) -> list[Category]:
        if self._model is None:
            return []
        return self._model.labels

    def train(
        self,
        examples: Iterable[tuple[str, Category]],
        categories: Optional[Sequence[Category]] = None,
    ) -> NaiveBayesModel:
        """Train on ``(text, label)`` pairs and keep the resulting model."""
        self._model = train_model(
            examples,
            categories=categories,
            normalizer=self.normalizer,
            workers=self.workers,
        )
        return self._model

    def classify(self, text: str) -> ClassificationResult:
        """Classify a single document with full scoring detail."""
        model = self.model
        tokens = self.normalizer.normalize(text)
        surviving = shared_vocabulary(model, tokens)
        evidence = [t for t in tokens if t in surviving]
        scores = _product_scores(model, evidence)
        return ClassificationResult(
            predicted_class=_argmax(scores),
            scores=scores,
            evidence=evidence,
            degenerate=not surviving,
        )

    def predict(self, text: str) -> Category:
        """Return only the predicted label."""
        return classify(self.model, text, self.normalizer)

    def predict_batch(self, texts: Iterable[str]) -> list[Category]:
        """Predict a label for each text."""
        model = self.model
        return [classify(model, text, self.normalizer) for text in texts]

    def save(self, path: str | Path) -> None:
        """Save the model and normalizer settings to a JSON file.

        Raises:
            NotTrainedError: If the classifier has not been trained.
        """
        model_data = {
            "version": MODEL_FORMAT_VERSION,
            "normalizer": self.normalizer.to_dict(),
            "model": self.model.to_dict(),
        }

        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(model_data, f, indent=2)

    @classmethod
    def load(cls, path: str | Path) -> "HeadlineClassifier":
        """Load a classifier saved with :meth:`save`.

        Raises:
            FileNotFoundError: If the file does not exist.
            ModelFormatError: If the file is not a saved model.
        """
        with open(path, "r", encoding="utf-8") as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as exc:
                raise ModelFormatError(f"{path} is not valid JSON: {exc}") from exc

        if not isinstance(data, dict) or "model" not in data:
            raise ModelFormatError(f"{path} does not contain a saved model")
        if data.get("version") != MODEL_FORMAT_VERSION:
            raise ModelFormatError(f"Unsupported model version: {data.get('version')!r}")

        hc = cls(normalizer=TextNormalizer.from_dict(data.get("normalizer", {})))
        hc._model = NaiveBayesModel.from_dict(data["model"])
        return hc
