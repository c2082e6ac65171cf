"""Text normalization for headline classification.

Turns raw headline text into the tokens that every count and probability
in the model is keyed by. The pipeline runs in a fixed order:

1. Punctuation -> whitespace ("U.S." becomes "U S", never "US")
2. Whitespace split, empty strings dropped
3. Lowercasing
4. Stop-word removal
5. Stemming

Stop words and the stemmer are configurable. English stop words ship with
the package so the default pipeline needs no downloaded NLTK data; other
languages read the NLTK ``stopwords`` corpus. Stemmers come from
``nltk.stem`` and are pure code.
"""

from __future__ import annotations

import string
import unicodedata
from collections import Counter
from functools import lru_cache
from typing import Iterable, Optional, Protocol, Union

from nltk.stem import LancasterStemmer, PorterStemmer, SnowballStemmer

from .errors import ConfigurationError

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

# English stop words (NLTK list without the apostrophe forms, which cannot
# survive punctuation stripping).
STOP_WORDS: frozenset[str] = frozenset({
    "i", "me", "my", "myself", "we", "our", "ours", "ourselves", "you",
    "your", "yours", "yourself", "yourselves", "he", "him", "his", "himself",
    "she", "her", "hers", "herself", "it", "its", "itself", "they", "them",
    "their", "theirs", "themselves", "what", "which", "who", "whom", "this",
    "that", "these", "those", "am", "is", "are", "was", "were", "be", "been",
    "being", "have", "has", "had", "having", "do", "does", "did", "doing",
    "a", "an", "the", "and", "but", "if", "or", "because", "as", "until",
    "while", "of", "at", "by", "for", "with", "about", "against", "between",
    "into", "through", "during", "before", "after", "above", "below", "to",
    "from", "up", "down", "in", "out", "on", "off", "over", "under", "again",
    "further", "then", "once", "here", "there", "when", "where", "why", "how",
    "all", "any", "both", "each", "few", "more", "most", "other", "some",
    "such", "no", "nor", "not", "only", "own", "same", "so", "than", "too",
    "very", "s", "t", "can", "will", "just", "don", "should", "now", "d",
    "ll", "m", "o", "re", "ve", "y", "ain", "aren", "couldn", "didn",
    "doesn", "hadn", "hasn", "haven", "isn", "ma", "mightn", "mustn",
    "needn", "shan", "shouldn", "wasn", "weren", "won", "wouldn",
})

STEMMER_NAMES: tuple[str, ...] = ("snowball", "porter", "lancaster", "none")

# Distinct words whose stems each normalizer remembers
STEM_CACHE_SIZE = 50_000

_ASCII_PUNCTUATION = frozenset(string.punctuation)


class Stemmer(Protocol):
    """Anything that reduces a word to its root."""

    def stem(self, word: str) -> str: ...


class _IdentityStemmer:
    """Stemmer that leaves words untouched (``stemmer="none"``)."""

    def stem(self, word: str) -> str:
        return word


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------


def get_stop_words(language: str = "english") -> frozenset[str]:
    """Return the stop-word set for a language.

    English uses the bundled :data:`STOP_WORDS`. Any other language is read
    from the NLTK ``stopwords`` corpus.

    Raises:
        ConfigurationError: If the corpus is not installed or has no list
            for the language.
    """
    language = language.lower()
    if language == "english":
        return STOP_WORDS

    from nltk.corpus import stopwords

    try:
        words = stopwords.words(language)
    except (LookupError, OSError) as exc:
        raise ConfigurationError(
            f"No stop-word list for {language!r}. "
            'Run `python -m nltk.downloader stopwords` or pass stop_words explicitly.'
        ) from exc
    return frozenset(w.lower() for w in words)


def make_stemmer(name: str = "snowball", language: str = "english") -> Stemmer:
    """Build a stemmer by name.

    Args:
        name: One of :data:`STEMMER_NAMES`.
        language: Language for the Snowball stemmer. Porter and Lancaster
            are English-only.

    Raises:
        ConfigurationError: On an unknown name or unsupported language.
    """
    name = name.lower()
    if name == "snowball":
        try:
            return SnowballStemmer(language.lower())
        except ValueError as exc:
            raise ConfigurationError(
                f"Snowball has no stemmer for {language!r}. "
                f"Supported: {', '.join(SnowballStemmer.languages)}"
            ) from exc
    if name in ("porter", "lancaster") and language.lower() != "english":
        raise ConfigurationError(f"The {name} stemmer only supports English, not {language!r}")
    if name == "porter":
        return PorterStemmer()
    if name == "lancaster":
        return LancasterStemmer()
    if name == "none":
        return _IdentityStemmer()
    raise ConfigurationError(f"Unknown stemmer {name!r}. Known: {', '.join(STEMMER_NAMES)}")


def strip_punctuation(text: str) -> str:
    """Replace every punctuation character with a space."""
    return "".join(
        " " if ch in _ASCII_PUNCTUATION or unicodedata.category(ch).startswith("P") else ch
        for ch in text
    )


# ---------------------------------------------------------------------------
# Normalizer
# ---------------------------------------------------------------------------


class TextNormalizer:
    """Turn raw text into normalized tokens.

    The same instance (or one built from the same settings) must be used for
    training and inference. A mismatch does not raise; it silently drops
    query tokens that no longer line up with the trained vocabulary.

    Example::

        normalizer = TextNormalizer()
        normalizer.normalize("Stocks are running higher in the U.S.")
        # ['stock', 'run', 'higher', 'u']

    Args:
        language: Selects the stop-word list and the Snowball language.
        stop_words: Explicit stop words; overrides the language list.
        stemmer: Stemmer name from :data:`STEMMER_NAMES` or an object with
            a ``stem(word)`` method.
    """

    def __init__(
        self,
        language: str = "english",
        stop_words: Optional[Iterable[str]] = None,
        stemmer: Union[str, Stemmer] = "snowball",
    ) -> None:
        self.language = language.lower()
        self._custom_stop_words = stop_words is not None
        if stop_words is None:
            self.stop_words = get_stop_words(self.language)
        else:
            self.stop_words = frozenset(w.lower() for w in stop_words)

        if isinstance(stemmer, str):
            self.stemmer_name: Optional[str] = stemmer.lower()
            self._stemmer = make_stemmer(self.stemmer_name, self.language)
        else:
            if not callable(getattr(stemmer, "stem", None)):
                raise ConfigurationError("stemmer must be a name or expose a stem(word) method")
            self.stemmer_name = None
            self._stemmer = stemmer

        self._cached_stem = lru_cache(maxsize=STEM_CACHE_SIZE)(self._stemmer.stem)

    def __repr__(self) -> str:
        stemmer = self.stemmer_name or type(self._stemmer).__name__
        return f"TextNormalizer(language={self.language!r}, stemmer={stemmer!r})"

    def tokenize(self, text: str) -> list[str]:
        """Split text into lowercase words with punctuation removed."""
        if not text:
            return []
        return [word.lower() for word in strip_punctuation(text).split()]

    def stem(self, word: str) -> str:
        """Stem a single word through a bounded LRU cache."""
        return self._cached_stem(word)

    def normalize(self, text: str) -> list[str]:
        """Run the full pipeline on ``text``.

        Stop words are matched before stemming, so a stem that is itself a
        stop word survives: "wills cans" gives ["will", "can"], and feeding
        that back in gives [].

        Returns:
            Tokens in input order. Empty input gives an empty list.
        """
        return [self.stem(word) for word in self.tokenize(text) if word not in self.stop_words]

    def term_frequencies(self, text: str) -> Counter:
        """Count normalized tokens in ``text`` (term frequency, not presence)."""
        return Counter(self.normalize(text))

    def to_dict(self) -> dict:
        """Serialize settings so an identical normalizer can be rebuilt.

        Raises:
            ConfigurationError: If a custom stemmer object was supplied.
        """
        if self.stemmer_name is None:
            raise ConfigurationError(
                f"Cannot serialize custom stemmer {type(self._stemmer).__name__}"
            )
        return {
            "language": self.language,
            "stemmer": self.stemmer_name,
            "stop_words": sorted(self.stop_words) if self._custom_stop_words else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "TextNormalizer":
        """Rebuild a normalizer from :meth:`to_dict` output."""
        return cls(
            language=data.get("language", "english"),
            stop_words=data.get("stop_words"),
            stemmer=data.get("stemmer", "snowball"),
        )


@lru_cache(maxsize=1)
def default_normalizer() -> TextNormalizer:
    """Shared English normalizer used wherever none is passed in."""
    return TextNormalizer()
