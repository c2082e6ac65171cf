"""The trained Naive Bayes model and the function that builds it.

A :class:`NaiveBayesModel` is an ordered, immutable collection of
per-category likelihood tables and priors. It is produced once by
:func:`train_model` and then passed read-only to every classification call,
so it can be shared across threads without locking.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from types import MappingProxyType
from typing import Hashable, Iterable, Iterator, Optional, Sequence

from .errors import ConfigurationError, ModelFormatError
from .preprocessing import TextNormalizer, default_normalizer
from .vocabulary import LikelihoodTable, build_vocabulary, estimate_likelihoods

logger = logging.getLogger(__name__)

Category = Hashable

_LABEL_TYPES = {"int": int, "str": str}


# ---------------------------------------------------------------------------
# Model types
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CategoryModel:
    """Likelihoods and prior for one category.

    Attributes:
        label: Category identifier, exactly as supplied for training.
        likelihoods: Read-only ``{token: probability}`` table.
        prior: Fraction of training documents carrying this label.
        document_count: Number of training documents behind the estimates.
    """

    label: Category
    likelihoods: LikelihoodTable
    prior: float
    document_count: int = 0

    def __contains__(self, token: object) -> bool:
        return token in self.likelihoods


@dataclass(frozen=True)
class NaiveBayesModel:
    """Ordered collection of :class:`CategoryModel` entries.

    Iteration order is the category enumeration order, which is also the
    tie-break order used by the classifier.
    """

    categories: tuple[CategoryModel, ...]

    def __post_init__(self) -> None:
        if not self.categories:
            raise ConfigurationError("A model needs at least one category")
        labels = [c.label for c in self.categories]
        if len(set(labels)) != len(labels):
            raise ConfigurationError(f"Duplicate category labels: {labels}")

    def __iter__(self) -> Iterator[CategoryModel]:
        return iter(self.categories)

    def __len__(self) -> int:
        return len(self.categories)

    @property
    def labels(self) -> list[Category]:
        """Category labels in enumeration order."""
        return [c.label for c in self.categories]

    @property
    def priors(self) -> dict[Category, float]:
        return {c.label: c.prior for c in self.categories}

    def category(self, label: Category) -> CategoryModel:
        """Look up one category.

        Raises:
            KeyError: If the label is not part of the model.
        """
        for entry in self.categories:
            if entry.label == label:
                return entry
        raise KeyError(label)

    def to_dict(self) -> dict:
        """Serialize to JSON-compatible primitives.

        Raises:
            ModelFormatError: If a label is neither ``int`` nor ``str``.
        """
        entries = []
        for entry in self.categories:
            label_type = type(entry.label).__name__
            if label_type not in _LABEL_TYPES:
                raise ModelFormatError(
                    f"Cannot serialize label {entry.label!r} of type {label_type}"
                )
            entries.append({
                "label": entry.label,
                "label_type": label_type,
                "prior": entry.prior,
                "document_count": entry.document_count,
                "likelihoods": dict(entry.likelihoods),
            })
        return {"categories": entries}

    @classmethod
    def from_dict(cls, data: dict) -> "NaiveBayesModel":
        """Rebuild a model from :meth:`to_dict` output.

        Raises:
            ModelFormatError: If required fields are missing or malformed.
        """
        try:
            entries = []
            for raw in data["categories"]:
                label_cls = _LABEL_TYPES[raw.get("label_type", "str")]
                entries.append(CategoryModel(
                    label=label_cls(raw["label"]),
                    likelihoods=MappingProxyType(
                        {str(t): float(p) for t, p in raw["likelihoods"].items()}
                    ),
                    prior=float(raw["prior"]),
                    document_count=int(raw.get("document_count", 0)),
                ))
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            raise ModelFormatError(f"Malformed model data: {exc}") from exc
        return cls(categories=tuple(entries))


# ---------------------------------------------------------------------------
# Training
# ---------------------------------------------------------------------------


def _group_by_label(
    examples: Iterable[tuple[str, Category]],
    categories: Optional[Sequence[Category]],
) -> tuple[list[Category], dict[Category, list[str]]]:
    """Bucket documents by label, checking them against the declared set."""
    grouped: dict[Category, list[str]] = defaultdict(list)
    seen: list[Category] = []
    for text, label in examples:
        if label not in grouped:
            seen.append(label)
        grouped[label].append(text)

    if categories is None:
        order = seen
    else:
        order = list(categories)
        if len(set(order)) != len(order):
            raise ConfigurationError(f"Duplicate labels in category set: {order}")
        declared = set(order)
        unknown = [label for label in seen if label not in declared]
        if unknown:
            raise ConfigurationError(
                f"Training labels {unknown} are not in the category set {order}"
            )

    empty = [label for label in order if not grouped.get(label)]
    if empty:
        raise ConfigurationError(f"Categories with no training documents: {empty}")
    return order, grouped


def train_model(
    examples: Iterable[tuple[str, Category]],
    categories: Optional[Sequence[Category]] = None,
    normalizer: Optional[TextNormalizer] = None,
    workers: int = 1,
) -> NaiveBayesModel:
    """Train a multinomial Naive Bayes model.

    Priors and likelihood tables are computed from the same examples.

    Args:
        examples: ``(text, label)`` pairs.
        categories: Closed label set in enumeration order. Defaults to the
            labels in order of first appearance.
        normalizer: Tokenizer shared with inference (default English pipeline).
        workers: Threads used to build per-category vocabularies.

    Returns:
        An immutable :class:`NaiveBayesModel`.

    Raises:
        ConfigurationError: If there are no examples, a declared category has
            no documents or no tokens, or a label is outside the category set.
    """
    normalizer = normalizer or default_normalizer()
    examples = list(examples)
    if not examples:
        raise ConfigurationError("Cannot train a model without examples")
    if workers < 1:
        raise ConfigurationError(f"workers must be at least 1, got {workers}")

    order, grouped = _group_by_label(examples, categories)
    total_docs = len(examples)
    logger.info("Training on %d documents across %d categories", total_docs, len(order))

    def _build(label: Category) -> CategoryModel:
        vocabulary = build_vocabulary(grouped[label], normalizer)
        if not vocabulary:
            raise ConfigurationError(
                f"Category {label!r} has no tokens left after normalization"
            )
        doc_count = len(grouped[label])
        logger.debug(
            "Category %r: %d documents, %d distinct tokens", label, doc_count, len(vocabulary)
        )
        return CategoryModel(
            label=label,
            likelihoods=estimate_likelihoods(vocabulary),
            prior=doc_count / total_docs,
            document_count=doc_count,
        )

    if workers == 1 or len(order) == 1:
        entries = [_build(label) for label in order]
    else:
        with ThreadPoolExecutor(max_workers=min(workers, len(order))) as pool:
            entries = list(pool.map(_build, order))

    return NaiveBayesModel(categories=tuple(entries))
