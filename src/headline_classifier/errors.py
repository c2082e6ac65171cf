"""Exception types raised by headline-classifier."""

from __future__ import annotations


class HeadlineClassifierError(Exception):
    """Base class for all package errors."""


class ConfigurationError(HeadlineClassifierError, ValueError):
    """Training data or normalizer settings cannot produce a usable model.

    Raised at construction time (model training, normalizer setup), never
    deferred to inference.
    """


class NotTrainedError(HeadlineClassifierError, RuntimeError):
    """Inference was requested before a model was trained or loaded."""


class ModelFormatError(HeadlineClassifierError, ValueError):
    """A serialized model is missing fields or has the wrong shape."""


class DatasetError(HeadlineClassifierError, ValueError):
    """A dataset file cannot be read into labeled documents."""
