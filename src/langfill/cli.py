import sys
import time
import logging
from dataclasses import dataclass

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from . import __version__
from .config import load_config
from .errors import LangfillError
from .processor import LocaleProcessor
from .translator import LeafTranslator, TreeTranslator, build_translator

logger = logging.getLogger(__name__)

console = Console()

BANNER = """
[bold cyan]  _                    __ _ _ _
 | | __ _ _ __   __ _ / _(_) | |
 | |/ _` | '_ \\ / _` | |_| | | |
 | | (_| | | | | (_| |  _| | | |
 |_|\\__,_|_| |_|\\__, |_| |_|_|_|
                |___/[/bold cyan]
[dim cyan]Locale Gap Filler • v{}[/dim cyan]
""".format(__version__)

UP_TO_DATE = 'up-to-date'
TRANSLATED = 'translated'
FAILED = 'failed'


@dataclass
class LanguageResult:
    language: str
    status: str
    translated: int = 0
    error: str = None


def setup_logging(verbose=False):
    """Routes the langfill loggers through rich on the shared console."""
    package_logger = logging.getLogger('langfill')
    package_logger.handlers.clear()
    handler = RichHandler(console=console, show_time=False, show_path=False)
    handler.setFormatter(logging.Formatter("%(message)s"))
    package_logger.addHandler(handler)
    package_logger.setLevel(logging.DEBUG if verbose else logging.INFO)


def handle_sigint():
    console.print("\n[bold red]✖ Interrupted by user. Exiting...[/bold red]")
    sys.exit(130)


def process_language(language, source_data, config, tree_translator):
    """Fills the gaps of one language file. Nothing is written unless every gap was translated."""
    target_file = config.target_file(language)
    target_data = LocaleProcessor.load_json(target_file)

    processor = LocaleProcessor(source_data)
    missing = processor.get_missing_keys(target_data)

    if not missing:
        logger.info("No missing keys for %s", language)
        return LanguageResult(language, UP_TO_DATE)

    count = LocaleProcessor.count_leaves(missing)
    logger.info("Found %d missing keys for %s", count, language)

    translated = tree_translator.translate_tree(missing, language)
    merged = LocaleProcessor.merge_trees(target_data, translated)
    LocaleProcessor.save_json(target_file, merged)

    logger.info("Translation file saved to %s", target_file)
    return LanguageResult(language, TRANSLATED, count)


def sync_languages(config, source_data, tree_translator):
    """Processes the configured languages one at a time; a failed language does not stop the rest."""
    results = []
    for language in config.languages:
        logger.info("Starting translation for %s...", language)
        try:
            result = process_language(language, source_data, config, tree_translator)
        except LangfillError as e:
            logger.error("Translation for %s aborted: %s", language, e)
            result = LanguageResult(language, FAILED, error=str(e))
        results.append(result)
    return results


def print_settings(config):
    table = Table(box=None, padding=(0, 2))
    table.add_column("Property", style="bold blue")
    table.add_column("Value", style="white")

    table.add_row("Version", f"[magenta]{__version__}[/magenta]")
    table.add_row("Source", f"[green]{config.language_source}[/green]")
    table.add_row("Output", f"[green]{config.output_dir}[/green]")
    table.add_row("Languages", f"[yellow]{len(config.languages)}[/yellow] ({', '.join(config.languages)})")
    table.add_row("Provider", f"[cyan]{config.provider}[/cyan]")
    table.add_row("Retries", f"{config.retry_count} (base delay {int(config.retry_delay)}ms)")

    console.print(Panel(table, title="[bold white]Settings Summary[/bold white]", border_style="blue", expand=False))


def print_summary(results, elapsed):
    summary_table = Table(title="\nSync Statistics", box=None, header_style="bold underline white")
    summary_table.add_column("Language", style="cyan")
    summary_table.add_column("Status")
    summary_table.add_column("Translated", justify="right")

    styles = {
        TRANSLATED: "[green]Done[/green]",
        UP_TO_DATE: "[dim white]Up to date[/dim white]",
        FAILED: "[bold red]Failed[/bold red]",
    }
    for result in results:
        summary_table.add_row(result.language, styles[result.status], f"[bold]{result.translated}[/bold]")

    console.print(summary_table)

    failed = [r.language for r in results if r.status == FAILED]
    total = sum(r.translated for r in results)
    if failed:
        headline = f"[bold red]✖ Sync finished with errors ({', '.join(failed)})[/bold red]"
        border = "red"
    else:
        headline = "[bold green]✓ Sync Completed Successfully![/bold green]"
        border = "green"

    console.print(Panel(
        f"{headline}\n"
        f"[dim]Time elapsed:[/dim] [bold cyan]{elapsed:.2f}s[/bold cyan]\n"
        f"[dim]Total translated keys:[/dim] [bold magenta]{total}[/bold magenta]",
        border_style=border,
        expand=False
    ))


@click.command(context_settings=dict(help_option_names=['-h', '--help']))
@click.version_option(__version__, prog_name='langfill')
@click.option('-v', '--verbose', is_flag=True, help='Show debug output.')
def main(verbose):
    """Translate the keys missing from each language file in translator.config.json."""
    setup_logging(verbose)
    try:
        console.print(BANNER)
        start_time = time.time()

        try:
            config, _ = load_config()
            source_data = LocaleProcessor.load_source(config.language_source)
        except LangfillError as e:
            logger.error("%s", e)
            sys.exit(1)

        print_settings(config)

        leaf_translator = LeafTranslator(
            build_translator(config),
            retry_count=config.retry_count,
            retry_delay=config.retry_delay_seconds,
        )
        results = sync_languages(config, source_data, TreeTranslator(leaf_translator))

        print_summary(results, time.time() - start_time)

        if any(r.status == FAILED for r in results):
            sys.exit(1)
        logger.info("All translations completed!")

    except KeyboardInterrupt:
        handle_sigint()


if __name__ == "__main__":
    main()
