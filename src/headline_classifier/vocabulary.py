"""Per-category token counts and likelihood estimates.

A category's vocabulary is the summed term frequency of every token across
its training documents. Its likelihood table divides each count by the
category's total token count. No smoothing is applied: a token never seen
in a category has no entry at all, and the classifier skips it instead of
treating it as zero.
"""

from __future__ import annotations

from collections import Counter
from types import MappingProxyType
from typing import Iterable, Mapping, Optional

from .errors import ConfigurationError
from .preprocessing import TextNormalizer, default_normalizer

# Read-only views handed out by this module.
CategoryVocabulary = Mapping[str, int]
LikelihoodTable = Mapping[str, float]


def build_vocabulary(
    documents: Iterable[str],
    normalizer: Optional[TextNormalizer] = None,
) -> CategoryVocabulary:
    """Count tokens across all documents of one category.

    Args:
        documents: Raw texts that share a label.
        normalizer: Tokenizer to apply (default English pipeline if None).

    Returns:
        Read-only ``{token: count}`` mapping; every count is at least 1.
    """
    normalizer = normalizer or default_normalizer()
    counts: Counter[str] = Counter()
    for document in documents:
        counts.update(normalizer.term_frequencies(document))
    return MappingProxyType(dict(counts))


def estimate_likelihoods(vocabulary: CategoryVocabulary) -> LikelihoodTable:
    """Convert token counts into per-token frequency estimates.

    Raises:
        ConfigurationError: If the vocabulary holds no tokens.
    """
    total = sum(vocabulary.values())
    if total <= 0:
        raise ConfigurationError("Cannot estimate likelihoods from an empty vocabulary")
    return MappingProxyType({token: count / total for token, count in vocabulary.items()})
