"""ABOUTME: CLI entry point for sluggable developer commands.
ABOUTME: Provides normalize and check-config commands via Typer."""

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from sluggable.config import load_sluggable_config
from sluggable.exceptions import InvalidOption
from sluggable.logs import init_logging
from sluggable.normalize import slugify
from sluggable.options import Derivation, guard_against_invalid_slug_options
from sluggable.settings import settings

app = typer.Typer(
    name="sluggable",
    help="Slug generation helpers.",
    no_args_is_help=True,
)

console = Console()


@app.callback()
def main(
    log_config: Path | None = typer.Option(None, "--log-config", help="Logging dictConfig YAML file"),
) -> None:
    """Slug generation helpers."""
    if log_config is not None:
        init_logging(log_config)


@app.command()
def normalize(
    text: str = typer.Argument(..., help="Text to turn into a slug"),
    max_length: int = typer.Option(
        settings.DEFAULT_MAXIMUM_LENGTH, "--max-length", "-m", help="Truncate the text to this many characters first"
    ),
) -> None:
    """Print the slug that would be derived from TEXT."""
    if max_length <= 0:
        console.print(f"[red]Error:[/] {InvalidOption.invalid_maximum_length()}")
        raise typer.Exit(1)
    typer.echo(slugify(text[:max_length]))


@app.command("check-config")
def check_config(
    config_path: Path | None = typer.Argument(None, help="Options file, defaults to configs/sluggable.yml"),
) -> None:
    """Validate the slug options configured for each record type."""
    try:
        config = load_sluggable_config(config_path)
    except FileNotFoundError as e:
        console.print(f"[red]Error:[/] {e}")
        raise typer.Exit(1) from None

    table = Table(title="Slug options")
    table.add_column("Record type")
    table.add_column("Source")
    table.add_column("Slug field")
    table.add_column("Max length", justify="right")
    table.add_column("Unique")
    table.add_column("Status")

    failures = 0
    for record_type in config.get_record_types():
        options = config.get_options(record_type)
        try:
            guard_against_invalid_slug_options(options)
            status = "[green]ok[/]"
        except InvalidOption as e:
            failures += 1
            status = f"[red]{e.kind.value}[/]"

        source = "<function>" if isinstance(options.source, Derivation) else ", ".join(options.source.names)
        table.add_row(
            record_type,
            source,
            options.slug_field,
            str(options.maximum_length),
            "yes" if options.generate_unique_slugs else "no",
            status,
        )

    console.print(table)
    if failures:
        console.print(f"[red]{failures} record type(s) have invalid slug options[/]")
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
