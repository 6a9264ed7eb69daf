"""
Command-line interface for LexCerta.

Each command prints the response envelope as JSON. Exit status is 0 when the
envelope is valid and 1 otherwise.
"""

import json
import sys
from pathlib import Path

import click

from lexcerta.config import ConfigurationError, load_config
from lexcerta.logging import initialize_logging
from lexcerta.verification import ToolResponseEnvelope, VerificationService
from lexcerta.verification.citation import parse_citation_envelope


def _emit(envelope: ToolResponseEnvelope, pretty: bool) -> None:
    click.echo(json.dumps(envelope.to_dict(), indent=2 if pretty else None))
    sys.exit(0 if envelope.valid else 1)


def _build_service() -> VerificationService:
    try:
        config = load_config()
    except ConfigurationError as e:
        raise click.ClickException(str(e))
    initialize_logging(
        log_dir=Path(config.logging.log_dir),
        level=config.logging.level,
        rotation=config.logging.rotation,
        retention=config.logging.retention,
        format_string=config.logging.format,
        enable_file_logging=config.logging.enable_file_logging,
        enable_console_logging=config.logging.enable_console_logging,
    )
    return VerificationService.from_config(config)


@click.group()
@click.version_option(package_name="lexcerta")
def cli():
    """Verify legal citations and quotations against CourtListener."""
    pass


@cli.command()
@click.argument("citation")
@click.option("--pretty", is_flag=True, help="Indent JSON output")
def parse(citation, pretty):
    """Parse CITATION into volume, reporter and page (no network)."""
    _emit(parse_citation_envelope(citation), pretty)


@cli.command("verify-citation")
@click.argument("citation")
@click.option("--pretty", is_flag=True, help="Indent JSON output")
def verify_citation_command(citation, pretty):
    """Check that CITATION refers to a real case."""
    service = _build_service()
    try:
        envelope = service.verify_citation(citation)
    finally:
        service.close()
    _emit(envelope, pretty)


@cli.command("verify-quote")
@click.argument("citation")
@click.option(
    "--text",
    "-t",
    required=True,
    help="Quoted passage attributed to the citation",
)
@click.option("--pretty", is_flag=True, help="Indent JSON output")
def verify_quote_command(citation, text, pretty):
    """Check that a quoted passage appears in the opinion cited by CITATION."""
    service = _build_service()
    try:
        envelope = service.verify_quote_integrity(citation, text)
    finally:
        service.close()
    _emit(envelope, pretty)


if __name__ == "__main__":
    cli()
