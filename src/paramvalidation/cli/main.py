"""paramvalidation CLI entry point."""

import logging

import click

from paramvalidation.config import ValidationConfig, create_catalog
from paramvalidation.errors import InvalidArgumentError
from paramvalidation.validation.parser import ConstraintParser


@click.group()
@click.pass_context
def cli(ctx):
    """paramvalidation — constraint string and parameter validation CLI."""
    try:
        config = ValidationConfig.from_env()
        logging.basicConfig(
            level=config.logging_level,
            format="%(levelname)s %(name)s: %(message)s",
        )
        catalog = create_catalog(config)
    except InvalidArgumentError as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1)
    ctx.obj = ConstraintParser(catalog)


# Register subcommands
from paramvalidation.cli.check_cmd import check, parse, validate  # noqa: E402

cli.add_command(parse)
cli.add_command(check)
cli.add_command(validate)
