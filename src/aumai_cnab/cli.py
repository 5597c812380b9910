"""CLI entry point for aumai-cnab."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any, NoReturn

import click

from .codec import encode, load_file, write_file
from .core import validate_bundle, values_or_defaults
from .errors import (
    DecodeError,
    EncodeError,
    ParameterValidationError,
    ResolutionError,
    StructuralError,
)
from .logger import get_logger
from .models import Bundle

_BUNDLE_OPTION = click.option(
    "--bundle",
    "bundle_path",
    required=True,
    type=click.Path(exists=True, dir_okay=False),
    help="Path to the bundle.json document.",
)


def _fail(message: str) -> NoReturn:
    click.echo(f"Error: {message}", err=True)
    sys.exit(1)


def _load(bundle_path: str) -> Bundle:
    try:
        return load_file(bundle_path)
    except DecodeError as exc:
        _fail(str(exc))


@click.group()
@click.version_option(package_name="aumai-cnab")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default=None,
    help="Log level (defaults to $AUMAI_CNAB_LOG_LEVEL or WARNING).",
)
def main(log_level: str | None) -> None:
    """AumAI CNAB: load, validate and parameterize CNAB bundle documents."""
    get_logger("aumai_cnab", log_level)


@main.command("validate")
@_BUNDLE_OPTION
def validate_command(bundle_path: str) -> None:
    """Check a bundle document for structural errors."""
    bundle = _load(bundle_path)
    try:
        validate_bundle(bundle)
    except StructuralError as exc:
        _fail(str(exc))

    click.echo(f"Bundle {bundle.name} {bundle.version} is valid.")


@main.command("values")
@_BUNDLE_OPTION
@click.option(
    "--set",
    "assignments",
    multiple=True,
    metavar="NAME=VALUE",
    help="Parameter value; may be repeated.",
)
@click.option(
    "--values-file",
    type=click.Path(exists=True, dir_okay=False),
    help="JSON object of parameter values (overridden by --set).",
)
def values_command(
    bundle_path: str, assignments: tuple[str, ...], values_file: str | None
) -> None:
    """Print the effective parameter values as JSON."""
    bundle = _load(bundle_path)

    supplied: dict[str, Any] = {}
    if values_file:
        try:
            loaded = json.loads(Path(values_file).read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            _fail(f"invalid JSON in {values_file}: {exc}")
        if not isinstance(loaded, dict):
            _fail(f"{values_file} must contain a JSON object")
        supplied.update(loaded)

    for item in assignments:
        name, sep, text = item.partition("=")
        if not sep or not name:
            _fail(f"expected NAME=VALUE, got {item!r}")
        definition = bundle.parameters.get(name)
        if definition is None:
            supplied[name] = text
            continue
        try:
            supplied[name] = definition.convert_value(text)
        except ParameterValidationError as exc:
            _fail(f"can't use {text!r} as value of {name}: {exc}")

    try:
        resolved = values_or_defaults(supplied, bundle)
    except ResolutionError as exc:
        _fail(str(exc))

    click.echo(json.dumps(resolved, indent=2, sort_keys=True))


@main.command("fmt")
@_BUNDLE_OPTION
@click.option(
    "--output",
    "output_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Write the canonical document here instead of stdout.",
)
def fmt_command(bundle_path: str, output_path: str | None) -> None:
    """Rewrite a bundle document in canonical JSON form."""
    bundle = _load(bundle_path)
    try:
        if output_path:
            write_file(bundle, output_path)
            click.echo(f"Wrote canonical bundle: {output_path}")
        else:
            click.echo(encode(bundle).decode("utf-8"))
    except EncodeError as exc:
        _fail(str(exc))


@main.command("inspect")
@_BUNDLE_OPTION
def inspect_command(bundle_path: str) -> None:
    """Summarize a bundle document."""
    bundle = _load(bundle_path)

    click.echo(f"Bundle     : {bundle.name}")
    click.echo(f"Version    : {bundle.version}")
    if bundle.description:
        click.echo(f"Description: {bundle.description}")
    if bundle.keywords:
        click.echo(f"Keywords   : {', '.join(bundle.keywords)}")
    for maintainer in bundle.maintainers:
        contact = f" <{maintainer.email}>" if maintainer.email else ""
        click.echo(f"Maintainer : {maintainer.name}{contact}")

    click.echo(f"\nInvocation images ({len(bundle.invocation_images)}):")
    for image in bundle.invocation_images:
        click.echo(f"  {image.base.image_type:<8}  {image.base.image}")

    if bundle.images:
        click.echo(f"\nImages ({len(bundle.images)}):")
        for name, img in sorted(bundle.images.items()):
            click.echo(f"  {name:<20}  {img.base.image}  {img.description}")

    if bundle.actions:
        click.echo(f"\nActions ({len(bundle.actions)}):")
        for name, action in sorted(bundle.actions.items()):
            flags = [
                flag
                for flag, on in (("modifies", action.modifies), ("stateless", action.stateless))
                if on
            ]
            suffix = f"  [{', '.join(flags)}]" if flags else ""
            click.echo(f"  {name:<20}{suffix}  {action.description}")

    click.echo(f"\nParameters ({len(bundle.parameters)}):")
    for name, definition in sorted(bundle.parameters.items()):
        marker = "required" if definition.required else f"default={definition.default!r}"
        click.echo(f"  {name:<20}  {definition.data_type:<6}  {marker}")

    click.echo(f"\nCredentials ({len(bundle.credentials)}):")
    for name, location in sorted(bundle.credentials.items()):
        targets = [t for t in (location.path, f"${location.env}" if location.env else "") if t]
        click.echo(f"  {name:<20}  {', '.join(targets) or '(none)'}")


if __name__ == "__main__":
    main()
