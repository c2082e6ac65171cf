"""Headline Classifier -- multinomial Naive Bayes for news titles."""

__version__ = "0.1.0"

from .classifier import (
    ClassificationResult,
    HeadlineClassifier,
    classify,
    score_categories,
    shared_vocabulary,
)
from .config import Settings
from .datasets import LabeledDocument, k_fold_split, load_dataset, train_test_split
from .errors import (
    ConfigurationError,
    DatasetError,
    HeadlineClassifierError,
    ModelFormatError,
    NotTrainedError,
)
from .evaluation import (
    ClassScores,
    ClassificationMetrics,
    compute_metrics,
    cross_validate,
)
from .model import CategoryModel, NaiveBayesModel, train_model
from .preprocessing import (
    STOP_WORDS,
    TextNormalizer,
    default_normalizer,
    get_stop_words,
    make_stemmer,
)
from .vocabulary import build_vocabulary, estimate_likelihoods

__all__ = [
    # Normalization
    "TextNormalizer",
    "default_normalizer",
    "STOP_WORDS",
    "get_stop_words",
    "make_stemmer",
    # Training
    "build_vocabulary",
    "estimate_likelihoods",
    "train_model",
    "CategoryModel",
    "NaiveBayesModel",
    # Inference
    "classify",
    "score_categories",
    "shared_vocabulary",
    "HeadlineClassifier",
    "ClassificationResult",
    # Data and evaluation
    "LabeledDocument",
    "load_dataset",
    "train_test_split",
    "k_fold_split",
    "ClassScores",
    "ClassificationMetrics",
    "compute_metrics",
    "cross_validate",
    # Configuration and errors
    "Settings",
    "HeadlineClassifierError",
    "ConfigurationError",
    "NotTrainedError",
    "ModelFormatError",
    "DatasetError",
]
