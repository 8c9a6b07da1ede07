"""Command-line interface for the localization pipeline."""

import logging
from pathlib import Path
from typing import Dict, List, Optional

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn
from rich.table import Table

from .config import config
from .errors import PipelineError
from .models.translation_result import TranslationStats
from .output.file_assembler import TranslationFileAssembler
from .output.strings_loader import load_strings
from .storage.result_store import ResultStore
from .storage.translation_cache import TranslationCache
from .translation.adapter import BackendAdapter
from .translation.clients import ConfigurationError, TranslationBackend, create_backend
from .translation.consolidated import ConsolidatedTranslator
from .translation.orchestrator import BatchOrchestrator
from .translation.partitioner import BatchPartitioner
from .translation.reconciler import ResultReconciler, get_translation_stats
from .translation.retry import RetryPolicy
from .validation.quality_scorer import QualityScorer

console = Console()


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else config.log_level
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)],
        force=True,
    )
    # SDK request logging is noise at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


@click.group()
@click.version_option(version="0.1.0")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool):
    """Batch translation pipeline for extracted UI strings."""
    _setup_logging(verbose)


def _parse_languages(languages: str) -> List[str]:
    return [lang.strip() for lang in languages.split(",") if lang.strip()]


def _load_input(input_path: str, limit: Optional[int] = None) -> Dict[str, str]:
    """Load extracted strings, wrapping read/parse failures in PipelineError."""
    try:
        strings = load_strings(input_path)
    except (OSError, ValueError) as e:
        raise PipelineError(f"Could not read {input_path}: {e}", stage="load", cause=e) from e

    if limit:
        strings = dict(list(strings.items())[:limit])
    return strings


def _build_backend(backend: Optional[str]) -> TranslationBackend:
    try:
        return create_backend(backend or config.translation_backend, config)
    except ConfigurationError as e:
        raise PipelineError(str(e), stage="backend", cause=e) from e


def _fail(error: PipelineError):
    console.print(f"[red]Error ({error.stage}):[/red] {error}")
    raise click.Abort()


def _adapter(backend: TranslationBackend) -> BackendAdapter:
    return BackendAdapter(
        backend,
        policy=RetryPolicy.from_config(config),
        timeout=config.request_timeout,
    )


@cli.command()
@click.option(
    "--input", "-i",
    "input_path",
    required=True,
    type=click.Path(exists=True),
    help="Path to extracted strings .json file"
)
@click.option(
    "--languages", "-l",
    default=lambda: ",".join(config.target_languages),
    help="Comma-separated list of target language codes"
)
@click.option(
    "--analysis-id", "-a",
    default=None,
    help="Analysis identifier (defaults to the input file name)"
)
@click.option(
    "--batch-size", "-b",
    type=int,
    default=lambda: config.batch_size,
    help="Base number of strings per request"
)
@click.option(
    "--quality-threshold", "-q",
    type=float,
    default=lambda: config.quality_threshold,
    help="Scores below this are reported as low quality (0-1)"
)
@click.option("--backend", type=click.Choice(["openai", "deepl", "http"]), default=None)
@click.option(
    "--output", "-o",
    "output_dir",
    type=click.Path(),
    default=None,
    help="Write per-language translation files below this directory"
)
@click.option("--db", "db_path", default=lambda: config.results_db_path, help="Result store path")
@click.option("--cache", "cache_path", default=lambda: config.cache_path, help="Translation cache path")
@click.option(
    "--reconcile",
    "run_reconcile",
    is_flag=True,
    help="Reclassify unchanged failures as completed after translating"
)
@click.option(
    "--limit",
    type=int,
    default=None,
    help="Limit number of strings to translate (for testing)"
)
def translate(
    input_path: str,
    languages: str,
    analysis_id: Optional[str],
    batch_size: int,
    quality_threshold: float,
    backend: Optional[str],
    output_dir: Optional[str],
    db_path: str,
    cache_path: str,
    run_reconcile: bool,
    limit: Optional[int],
):
    """Translate extracted strings into target languages."""
    try:
        console.print(f"[blue]Reading:[/blue] {input_path}")
        strings = _load_input(input_path, limit)
        translation_backend = _build_backend(backend)
    except PipelineError as e:
        _fail(e)

    console.print(f"[green]Found:[/green] {len(strings)} strings")
    target_langs = _parse_languages(languages)
    analysis_id = analysis_id or Path(input_path).stem
    console.print(f"[blue]Target languages:[/blue] {', '.join(target_langs)}")
    console.print(f"[blue]Analysis:[/blue] {analysis_id} ({translation_backend.name})")

    store = ResultStore(db_path)
    orchestrator = BatchOrchestrator(
        adapter=_adapter(translation_backend),
        cache=TranslationCache(cache_path),
        store=store,
        partitioner=BatchPartitioner(batch_size, config.batch_max_tokens),
        scorer=QualityScorer(threshold=quality_threshold),
        quality_threshold=quality_threshold,
        batch_delay=config.batch_delay,
    )

    try:
        for lang in target_langs:
            console.print(f"\n[bold cyan]Translating to {lang.upper()}...[/bold cyan]")

            with Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                BarColumn(),
                TaskProgressColumn(),
                console=console,
            ) as progress:
                task = progress.add_task(f"Translating to {lang}", total=None)

                def update_progress(current, total, message):
                    progress.update(task, completed=current, total=total, description=f"[{lang}] {message}")

                result = orchestrator.run(analysis_id, strings, lang, update_progress)

            _print_stats(result.stats, lang)

        if run_reconcile:
            summary = ResultReconciler(store).reconcile(analysis_id)
            console.print(
                f"\n[blue]Reconciled:[/blue] {summary.fixed} fixed, "
                f"{summary.actual_failures} actual failures of {summary.total} failed"
            )

        if output_dir:
            assembler = TranslationFileAssembler(store)
            files = assembler.assemble(analysis_id, target_langs, source_strings=strings)
            for path in assembler.write(files, output_dir):
                console.print(f"[blue]Wrote:[/blue] {path}")

        console.print("[green]Done![/green]")
    finally:
        store.close()


@cli.command()
@click.option("--analysis-id", "-a", required=True, help="Analysis identifier")
@click.option("--db", "db_path", default=lambda: config.results_db_path, help="Result store path")
def reconcile(analysis_id: str, db_path: str):
    """Fix translations wrongly recorded as failed."""
    store = ResultStore(db_path)
    try:
        summary = ResultReconciler(store).reconcile(analysis_id)
    finally:
        store.close()

    table = Table(title=f"Reconciliation for {analysis_id}")
    table.add_column("Metric", style="cyan")
    table.add_column("Count", justify="right")
    table.add_row("Failed units reviewed", str(summary.total))
    table.add_row("Fixed", f"[green]{summary.fixed}[/green]")
    table.add_row("Actual failures", f"[red]{summary.actual_failures}[/red]")
    console.print(table)


@cli.command()
@click.option("--analysis-id", "-a", required=True, help="Analysis identifier")
@click.option("--db", "db_path", default=lambda: config.results_db_path, help="Result store path")
def stats(analysis_id: str, db_path: str):
    """Show translation statistics for an analysis."""
    store = ResultStore(db_path)
    try:
        summary = get_translation_stats(store, analysis_id)
        languages = store.languages(analysis_id)
        by_language = {lang: store.count_by_status(analysis_id, lang) for lang in languages}
    finally:
        store.close()

    table = Table(title=f"Statistics for {analysis_id}")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    table.add_row("Total units", str(summary["total"]))
    table.add_row("Completed", str(summary["completed"]))
    table.add_row("Failed", str(summary["failed"]))
    table.add_row("Average quality", f"{summary['avg_quality_score']:.2f}")
    table.add_row("Code strings", str(summary["code_strings_count"]))
    table.add_row("Languages", ", ".join(languages) or "None")

    for lang, counts in by_language.items():
        total = sum(counts.values())
        completed = counts.get("completed", 0)
        coverage = (completed / total) * 100 if total else 0
        table.add_row(f"  {lang} coverage", f"{completed}/{total} ({coverage:.1f}%)")

    console.print(table)


@cli.command()
@click.option("--analysis-id", "-a", required=True, help="Analysis identifier")
@click.option(
    "--output", "-o",
    "output_dir",
    required=True,
    type=click.Path(),
    help="Directory to write translation files into"
)
@click.option(
    "--languages", "-l",
    default=None,
    help="Comma-separated language codes (defaults to all stored languages)"
)
@click.option(
    "--source", "-s",
    "source_path",
    type=click.Path(exists=True),
    default=None,
    help="Extracted strings file; adds en.json to per-language output"
)
@click.option("--consolidated", is_flag=True, help="Write one consolidated translations.json")
@click.option("--db", "db_path", default=lambda: config.results_db_path, help="Result store path")
def export(
    analysis_id: str,
    output_dir: str,
    languages: Optional[str],
    source_path: Optional[str],
    consolidated: bool,
    db_path: str,
):
    """Write translation files from stored results."""
    try:
        source_strings = _load_input(source_path) if source_path else None
    except PipelineError as e:
        _fail(e)

    store = ResultStore(db_path)
    try:
        target_langs = _parse_languages(languages) if languages else store.languages(analysis_id)
        assembler = TranslationFileAssembler(store)
        if consolidated:
            files = [assembler.assemble_consolidated(analysis_id, target_langs)]
        else:
            files = assembler.assemble(analysis_id, target_langs, source_strings=source_strings)
        written = assembler.write(files, output_dir)
    finally:
        store.close()

    for path, file in zip(written, files):
        console.print(f"[blue]Wrote:[/blue] {path} ({file.entry_count} entries)")


@cli.command()
@click.option(
    "--input", "-i",
    "input_path",
    required=True,
    type=click.Path(exists=True),
    help="Path to extracted strings .json file"
)
@click.option(
    "--languages", "-l",
    default=lambda: ",".join(config.target_languages),
    help="Comma-separated list of target language codes"
)
@click.option(
    "--output", "-o",
    "output_dir",
    required=True,
    type=click.Path(),
    help="Directory to write src/i18n/translations.json into"
)
@click.option("--backend", type=click.Choice(["openai", "deepl", "http"]), default=None)
@click.option(
    "--batch-size", "-b",
    type=int,
    default=lambda: config.batch_size,
    help="Base number of keys per request"
)
def consolidate(
    input_path: str,
    languages: str,
    output_dir: str,
    backend: Optional[str],
    batch_size: int,
):
    """Translate strings straight into one consolidated translations.json."""
    try:
        strings = _load_input(input_path)
        translation_backend = _build_backend(backend)
    except PipelineError as e:
        _fail(e)

    target_langs = _parse_languages(languages)
    translator = ConsolidatedTranslator(
        _adapter(translation_backend),
        partitioner=BatchPartitioner(batch_size, config.batch_max_tokens),
        batch_delay=config.batch_delay,
    )

    with console.status(f"Translating {len(strings)} strings into {', '.join(target_langs)}..."):
        result = translator.translate(strings, target_langs)

    assembler = TranslationFileAssembler()
    written = assembler.write([assembler.consolidated_file(result.translations)], output_dir)
    console.print(f"[blue]Wrote:[/blue] {written[0]} ({len(result.translations)} keys)")

    is_valid, issues = ConsolidatedTranslator.validate_structure(
        result.translations, ["en"] + target_langs
    )
    for issue in (result.issues + issues)[:20]:
        console.print(f"  [yellow]![/yellow] {issue}")
    if result.failed_batches:
        console.print(f"[red]{result.failed_batches} of {result.batches} batches fell back to English[/red]")
    elif is_valid and not result.issues:
        console.print("[green]Done![/green]")


def _print_stats(stats: TranslationStats, lang: str):
    """Print translation statistics."""
    table = Table(title=f"Translation Statistics ({lang})")
    table.add_column("Metric", style="cyan")
    table.add_column("Count", justify="right")

    table.add_row("Total", str(stats.total))
    table.add_row("Completed", f"[green]{stats.completed}[/green]")
    table.add_row("Failed", f"[red]{stats.failed}[/red]")
    table.add_row("From cache", str(stats.cached))
    table.add_row("Code strings kept", str(stats.code_strings))
    table.add_row("Translated", str(stats.translated))
    table.add_row("Low quality", f"[yellow]{stats.low_quality}[/yellow]")
    table.add_row("Batches (failed)", f"{stats.batches} ({stats.failed_batches})")

    console.print(table)


if __name__ == "__main__":
    cli()
