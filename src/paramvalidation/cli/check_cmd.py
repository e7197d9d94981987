"""Constraint CLI commands — parse, check and validate."""

from pathlib import Path

import click

from paramvalidation.core.convert import to_data_type
from paramvalidation.core.types import ParameterDataType
from paramvalidation.errors import ConstraintParserError, ParameterConversionError
from paramvalidation.metadata.loader import ParameterLoader
from paramvalidation.metadata.validator import (
    escalate,
    validate_definitions_dir,
    validate_yaml_file,
)
from paramvalidation.validation.parser import ConstraintParser
from paramvalidation.validation.validator import ParameterValidator

_TYPE_NAMES = [t.value for t in ParameterDataType if t != ParameterDataType.NONE]

_type_option = click.option(
    "--type",
    "type_name",
    required=True,
    type=click.Choice(_TYPE_NAMES, case_sensitive=False),
    help="Data type of the parameter.",
)


def _parse_or_exit(parser: ConstraintParser, text: str, data_type: ParameterDataType):
    try:
        return parser.parse(text, data_type)
    except ConstraintParserError as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        if e.position is not None:
            click.echo(f"  {text}", err=True)
            click.echo("  " + " " * e.position + "^", err=True)
        raise SystemExit(1)


@click.command()
@click.argument("text")
@_type_option
@click.pass_obj
def parse(parser: ConstraintParser, text: str, type_name: str):
    """Parse a constraint string and print its canonical form."""
    data_type = ParameterDataType.from_name(type_name)
    constraints = _parse_or_exit(parser, text, data_type)

    click.echo(ConstraintParser.concat_constraints(constraints))
    for constraint in constraints:
        parameters = constraint.get_parameters()
        detail = f" ({', '.join(parameters)})" if parameters else ""
        click.echo(f"  {constraint.name}{detail}")


@click.command()
@click.argument("value", required=False)
@_type_option
@click.option("--constraints", "constraint_text", default="", help="Constraint string.")
@click.option("--member", default="value", show_default=True, help="Member name used in messages.")
@click.pass_obj
def check(
    parser: ConstraintParser,
    value: str | None,
    type_name: str,
    constraint_text: str,
    member: str,
):
    """Validate VALUE against a constraint string. Omit VALUE to check null."""
    data_type = ParameterDataType.from_name(type_name)
    constraints = _parse_or_exit(parser, constraint_text, data_type)

    native = None
    if value is not None:
        try:
            native = to_data_type(value, data_type, constraints)
        except ParameterConversionError as e:
            click.echo(click.style(f"Error: {e}", fg="red"), err=True)
            raise SystemExit(1)

    results = ParameterValidator.default().get_validation_result(
        native, data_type, constraints, member
    )
    for result in results:
        click.echo(click.style(f"✗ {result.message}", fg="red"))
    if results:
        raise SystemExit(1)

    click.echo(click.style("✓ Valid", fg="green"))


@click.command()
@click.argument("target_path", type=click.Path(exists=True, path_type=Path))
@click.option(
    "--strict",
    is_flag=True,
    default=False,
    help="Treat warnings as errors.",
)
@click.pass_obj
def validate(parser: ConstraintParser, target_path: Path, strict: bool):
    """Validate a parameter definition file or a directory of them."""
    if target_path.is_dir():
        issues = validate_definitions_dir(target_path, strict=strict, parser=parser)
    else:
        issues = validate_yaml_file(target_path, parser=parser)
        if strict:
            escalate(issues)

    errors = [i for i in issues if i.severity == "error"]
    warnings = [i for i in issues if i.severity == "warning"]

    for issue in issues:
        colour = "red" if issue.severity == "error" else "yellow"
        click.echo(click.style(str(issue), fg=colour))

    if errors:
        click.echo(
            click.style(
                f"\n{len(errors)} error(s) found"
                + (f", {len(warnings)} warning(s)" if warnings else ""),
                fg="red",
                bold=True,
            )
        )
        raise SystemExit(1)

    if warnings:
        click.echo(click.style(f"{len(warnings)} warning(s) found.", fg="yellow"))

    loader = ParameterLoader(parser)
    try:
        if target_path.is_dir():
            loader.load_dir(target_path)
        else:
            loader.load_file(target_path)
    except ValueError as e:
        click.echo(click.style(f"\nLoading failed: {e}", fg="red"), err=True)
        raise SystemExit(1)

    names = loader.list_parameters()
    click.echo(f"\nLoaded {len(names)} parameter(s):")
    for name in names:
        definition = loader.get_parameter(name)
        click.echo(f"  ✓ {name} ({definition.data_type}) {definition.constraint_text}".rstrip())

    click.echo(click.style("\nAll definitions are valid.", fg="green", bold=True))
