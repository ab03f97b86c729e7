"""
qsfuzz CLI - Command Line Interface

Reads URLs from stdin (or a file), deduplicates them and prints the
candidate URLs produced by injecting every configured rule into every
query parameter.
"""

import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from qsfuzz import __version__
from qsfuzz.core.config import load_config, parse_headers
from qsfuzz.core.constants import DEFAULTS, EXIT_ERROR, OutputFormat
from qsfuzz.core.exceptions import QsfuzzError
from qsfuzz.core.models import FuzzConfig, Injection, ParsedURL
from qsfuzz.intake.deduper import URLDeduper, read_urls
from qsfuzz.orchestrator.pool import CandidatePool

# Create CLI app
app = typer.Typer(
    name="qsfuzz",
    help="qsfuzz - Query string fuzzing candidate generator",
    add_completion=False,
    no_args_is_help=True,
)

# Status output goes to stderr, candidates to stdout
console = Console(stderr=True)

logger = logging.getLogger("qsfuzz")


def setup_logging(*, debug: bool = False, silent: bool = False) -> None:
    """Route qsfuzz logging to stderr through rich."""
    if debug:
        level = logging.DEBUG
    elif silent:
        level = logging.WARNING
    else:
        level = logging.INFO

    handler = RichHandler(console=console, show_path=False, markup=False)
    handler.setFormatter(logging.Formatter("%(message)s"))

    logger.handlers.clear()
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False


# ============================================================================
# Main Commands
# ============================================================================

@app.command()
def fuzz(
    config: Path = typer.Option(
        ...,
        "--config",
        "-c",
        help="File path to config file, which contains fuzz rules",
    ),
    input_file: Optional[Path] = typer.Option(
        None,
        "--input",
        "-i",
        help="File with one URL per line (defaults to stdin)",
    ),
    decode: bool = typer.Option(
        False,
        "--decode",
        "-d",
        help="Produce decoded query strings (this could cause many bad requests)",
    ),
    workers: int = typer.Option(
        DEFAULTS["concurrency"],
        "--workers",
        "-w",
        help="Set the concurrency/worker count",
        min=1,
    ),
    cookies: Optional[str] = typer.Option(
        None,
        "--cookies",
        help="Cookies to add in all requests",
    ),
    headers: Optional[str] = typer.Option(
        None,
        "--headers",
        "-H",
        help="Headers to add in all requests. Multiple should be separated by semi-colon",
    ),
    output_format: OutputFormat = typer.Option(
        OutputFormat.PLAIN,
        "--format",
        "-f",
        help="Output format (plain, json)",
        case_sensitive=False,
    ),
    silent: bool = typer.Option(
        False,
        "--silent",
        "-s",
        help="Only print candidates (mute status updates on stderr)",
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Print more info for malformed URLs and skipped candidates",
    ),
) -> None:
    """
    Generate fuzzing candidates for every URL read from input.
    """
    setup_logging(debug=debug, silent=silent)

    try:
        fuzz_config = load_config(config)
        if cookies is not None:
            fuzz_config.cookies = cookies
        if headers is not None:
            fuzz_config.headers = parse_headers(headers)

        logger.info(
            f"Loaded {len(fuzz_config.rules)} rules "
            f"({len(fuzz_config.injections)} injections) from {config}"
        )

        urls = read_urls(input_file)
        logger.info(f"{len(urls)} unique URLs with query strings to fuzz")

        pool = CandidatePool(
            fuzz_config.injections,
            concurrency=workers,
            decode_params=decode,
        )
        emit = _make_emitter(fuzz_config, output_format)
        stats = asyncio.run(pool.run(urls, emit))

        logger.info(
            f"Generated {stats.candidates} candidates from {stats.urls_processed} URLs"
            + (f" ({stats.urls_failed} failed)" if stats.urls_failed else "")
        )

    except (QsfuzzError, OSError) as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}", highlight=False)
        if debug:
            console.print_exception()
        raise typer.Exit(code=EXIT_ERROR)


@app.command()
def urls(
    input_file: Optional[Path] = typer.Option(
        None,
        "--input",
        "-i",
        help="File with one URL per line (defaults to stdin)",
    ),
    show_duplicates: bool = typer.Option(
        False,
        "--duplicates",
        help="Print groups of duplicate URLs to stderr",
    ),
) -> None:
    """
    Print the deduplicated, query-bearing URLs that would be fuzzed.
    """
    try:
        if input_file is None:
            lines = list(sys.stdin)
        else:
            with input_file.open("r", encoding="utf-8", errors="replace") as f:
                lines = f.readlines()
    except OSError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}", highlight=False)
        raise typer.Exit(code=EXIT_ERROR)

    deduper = URLDeduper()
    for url in deduper.deduplicate(lines):
        typer.echo(url)

    if show_duplicates:
        for key, group in deduper.get_duplicates(lines).items():
            console.print(f"[yellow]{len(group)} URLs share[/yellow] {escape(key)}", highlight=False)


@app.command()
def version() -> None:
    """Show version information."""
    console.print(f"[bold cyan]qsfuzz[/bold cyan] version [yellow]{__version__}[/yellow]")


def _make_emitter(fuzz_config: FuzzConfig, output_format: OutputFormat):
    """Build the consumer that writes candidates to stdout."""

    def emit_plain(url: ParsedURL, injection: Injection) -> None:
        typer.echo(injection.url)

    def emit_json(url: ParsedURL, injection: Injection) -> None:
        rule = fuzz_config.rule_for(injection.template)
        record = injection.to_dict()
        record.update({
            "source": url.geturl(),
            "rule": rule.name if rule else None,
            "headers": fuzz_config.headers,
            "cookies": fuzz_config.cookies,
        })
        typer.echo(json.dumps(record))

    if output_format == OutputFormat.JSON:
        return emit_json
    return emit_plain


def main() -> None:
    app()


if __name__ == "__main__":
    main()
