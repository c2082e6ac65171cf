"""Command-line interface for headline-classifier.

Provides ``train``, ``classify`` and ``evaluate`` commands with rich
terminal output using the ``click`` and ``rich`` libraries.

Usage::

    headline-classifier train news.jsonl --output model.json
    headline-classifier classify model.json "Stocks rally as inflation cools"
    headline-classifier evaluate news.jsonl --test-size 0.2
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from .classifier import HeadlineClassifier
from .config import Settings
from .datasets import load_dataset, train_test_split
from .errors import HeadlineClassifierError
from .evaluation import ClassificationMetrics, compute_metrics, cross_validate
from .preprocessing import STEMMER_NAMES, TextNormalizer

console = Console()
err_console = Console(stderr=True)


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _fail(exc: Exception) -> None:
    err_console.print(f"[bold red]Error:[/] {exc}")
    sys.exit(1)


@click.group()
@click.version_option(package_name="headline-classifier")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.pass_context
def main(ctx: click.Context, verbose: bool) -> None:
    """📰 Headline Classifier: Naive Bayes news title categorization.

    Train a model from labeled headlines, classify new ones, and measure
    accuracy on held-out data.
    """
    try:
        settings = Settings.from_env()
    except HeadlineClassifierError as e:
        _fail(e)
    _configure_logging("DEBUG" if verbose else settings.log_level)
    ctx.obj = settings


def _dataset_options(func):
    func = click.option("--label-column", default=None, help="Label column (auto-detected).")(func)
    func = click.option("--text-column", default=None, help="Text column (auto-detected).")(func)
    return func


def _normalizer_options(func):
    func = click.option("--stemmer", type=click.Choice(STEMMER_NAMES), default=None,
                        help="Stemming algorithm.")(func)
    func = click.option("--language", default=None, help="Stop-word and stemmer language.")(func)
    return func


def _build_normalizer(settings: Settings, language: str | None, stemmer: str | None) -> TextNormalizer:
    return TextNormalizer(
        language=language or settings.language,
        stemmer=stemmer or settings.stemmer,
    )


@main.command()
@click.argument("dataset", type=click.Path(exists=True, path_type=Path))
@click.option("--output", "-o", type=click.Path(path_type=Path), required=True,
              help="Where to write the trained model (JSON).")
@_dataset_options
@_normalizer_options
@click.option("--workers", "-w", type=int, default=None, help="Training threads.")
@click.pass_obj
def train(
    settings: Settings,
    dataset: Path,
    output: Path,
    text_column: str | None,
    label_column: str | None,
    language: str | None,
    stemmer: str | None,
    workers: int | None,
) -> None:
    """Train a model from a labeled dataset.

    Example: headline-classifier train news.jsonl -o model.json
    """
    with console.status("[bold blue]Training model...", spinner="dots"):
        try:
            examples = load_dataset(dataset, text_column, label_column)
            classifier = HeadlineClassifier(
                normalizer=_build_normalizer(settings, language, stemmer),
                workers=workers or settings.workers,
            )
            model = classifier.train(examples)
            classifier.save(output)
        except (HeadlineClassifierError, OSError) as e:
            _fail(e)

    table = Table(title=f"Model: {output.name}")
    table.add_column("Category", style="cyan")
    table.add_column("Documents", justify="right")
    table.add_column("Prior", justify="right")
    table.add_column("Vocabulary", justify="right")
    for entry in model:
        table.add_row(
            str(entry.label),
            str(entry.document_count),
            f"{entry.prior:.3f}",
            str(len(entry.likelihoods)),
        )
    console.print(table)
    console.print(f"[dim]Model saved to {output}[/]")


@main.command()
@click.argument("model_path", metavar="MODEL", type=click.Path(exists=True, path_type=Path))
@click.argument("texts", nargs=-1, required=True)
@click.option("--output", "-o", type=click.Choice(["rich", "json"]), default="rich",
              help="Output format.")
def classify(model_path: Path, texts: tuple[str, ...], output: str) -> None:
    """Classify one or more headlines with a saved model.

    Example: headline-classifier classify model.json "Team wins the cup"
    """
    try:
        classifier = HeadlineClassifier.load(model_path)
    except (HeadlineClassifierError, OSError) as e:
        _fail(e)

    results = [classifier.classify(text) for text in texts]

    if output == "json":
        click.echo(json.dumps(
            [{"text": text, **r.to_dict()} for text, r in zip(texts, results)],
            indent=2,
        ))
        return

    table = Table(title="Predictions", show_lines=True)
    table.add_column("Headline", style="white", max_width=60)
    table.add_column("Category", style="cyan")
    table.add_column("Conf.", justify="center", width=6)
    table.add_column("Evidence", style="dim")
    for text, result in zip(texts, results):
        evidence = " ".join(result.evidence) if result.evidence else "(prior only)"
        table.add_row(text, str(result.predicted_class), f"{result.confidence:.0%}", evidence)
    console.print(table)


@main.command()
@click.argument("dataset", type=click.Path(exists=True, path_type=Path))
@_dataset_options
@_normalizer_options
@click.option("--test-size", type=click.FloatRange(0.0, 1.0, max_open=True), default=0.2,
              show_default=True, help="Held-out fraction.")
@click.option("--seed", type=int, default=42, show_default=True, help="Split seed.")
@click.option("--folds", "-k", type=int, default=None,
              help="Run k-fold cross-validation instead of a single split.")
@click.option("--output", "-o", type=click.Choice(["rich", "json"]), default="rich",
              help="Output format.")
@click.pass_obj
def evaluate(
    settings: Settings,
    dataset: Path,
    text_column: str | None,
    label_column: str | None,
    language: str | None,
    stemmer: str | None,
    test_size: float,
    seed: int,
    folds: int | None,
    output: str,
) -> None:
    """Measure accuracy on held-out data.

    Example: headline-classifier evaluate news.jsonl --folds 5
    """
    with console.status("[bold blue]Evaluating...", spinner="dots"):
        try:
            examples = load_dataset(dataset, text_column, label_column)
            if folds:
                fold_metrics = cross_validate(
                    examples,
                    k=folds,
                    seed=seed,
                    normalizer_kwargs={
                        "language": language or settings.language,
                        "stemmer": stemmer or settings.stemmer,
                    },
                )
            else:
                train_set, test_set = train_test_split(examples, test_size=test_size, seed=seed)
                classifier = HeadlineClassifier(
                    normalizer=_build_normalizer(settings, language, stemmer),
                    workers=settings.workers,
                )
                model = classifier.train(train_set)
                predictions = classifier.predict_batch(doc.text for doc in test_set)
                fold_metrics = [
                    compute_metrics([doc.label for doc in test_set], predictions, model.labels)
                ]
        except (HeadlineClassifierError, OSError, ValueError) as e:
            _fail(e)

    if output == "json":
        click.echo(json.dumps([m.to_dict() for m in fold_metrics], indent=2))
        return

    for i, metrics in enumerate(fold_metrics, 1):
        title = f"Fold {i}/{len(fold_metrics)}" if len(fold_metrics) > 1 else "Held-out evaluation"
        console.print(Panel(metrics.summary(), title=title, border_style="blue"))
        _render_confusion_matrix(metrics)

    if len(fold_metrics) > 1:
        mean = sum(m.accuracy for m in fold_metrics) / len(fold_metrics)
        console.print(f"Mean accuracy: [bold]{mean:.2%}[/]")


def _render_confusion_matrix(metrics: ClassificationMetrics) -> None:
    """Render the confusion matrix as a rich table (rows = true labels)."""
    table = Table(title="Confusion matrix (rows: true, columns: predicted)")
    table.add_column("", style="cyan")
    for cls in metrics.classes:
        table.add_column(str(cls), justify="right")
    for true in metrics.classes:
        row = metrics.confusion_matrix[true]
        table.add_row(
            str(true),
            *(f"[bold]{row[pred]}[/]" if pred == true else str(row[pred]) for pred in metrics.classes),
        )
    console.print(table)
    console.print()


if __name__ == "__main__":
    main()
