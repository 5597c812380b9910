"""Core logic for aumai-cnab: structural validation and parameter resolution."""

from __future__ import annotations

import logging
from typing import Any, Callable, Mapping

from .errors import (
    MissingParameterError,
    MissingTagError,
    NoInvocationImageError,
    ParameterValidationError,
    ParameterValueError,
    ReservedVersionError,
)
from .models import Bundle, InvocationImage, ParameterDefinition

__all__ = [
    "ImageRule",
    "register_image_rule",
    "resolve_values",
    "validate_bundle",
    "validate_invocation_image",
    "values_or_defaults",
]

logger = logging.getLogger(__name__)

_RESERVED_VERSION = "latest"

ImageRule = Callable[[InvocationImage], None]


# ---------------------------------------------------------------------------
# Structural validation
# ---------------------------------------------------------------------------


def _require_tag(image: InvocationImage) -> None:
    """Docker-like references must name a tag; only the ':' separator is checked."""
    if ":" not in image.base.image:
        raise MissingTagError(image.base.image)


def _accept(image: InvocationImage) -> None:
    """Image types without a rule are accepted as-is."""


_IMAGE_RULES: dict[str, ImageRule] = {
    "docker": _require_tag,
    "oci": _require_tag,
}


def register_image_rule(image_type: str, rule: ImageRule) -> None:
    """
    Install *rule* as the validator for invocation images of *image_type*.

    A rule raises a ``StructuralError`` subclass to reject an image.  An
    existing rule for the same type is replaced.
    """
    _IMAGE_RULES[image_type] = rule


def validate_invocation_image(image: InvocationImage) -> None:
    """Validate one invocation image using the rule for its image type."""
    rule = _IMAGE_RULES.get(image.base.image_type, _accept)
    rule(image)


def validate_bundle(bundle: Bundle) -> None:
    """
    Validate the bundle contents.

    Checks run in order and the first failure is raised:

    1. at least one invocation image is defined;
    2. the version is not the reserved ``"latest"``;
    3. every invocation image passes the rule for its type, in sequence order.
    """
    if not bundle.invocation_images:
        raise NoInvocationImageError()

    if bundle.version == _RESERVED_VERSION:
        raise ReservedVersionError(bundle.version)

    for image in bundle.invocation_images:
        validate_invocation_image(image)

    logger.debug("Bundle %s %s passed validation", bundle.name, bundle.version)


# ---------------------------------------------------------------------------
# Parameter resolution
# ---------------------------------------------------------------------------


def resolve_values(
    supplied: Mapping[str, Any],
    parameters: Mapping[str, ParameterDefinition],
) -> dict[str, Any]:
    """
    Return the effective value of every parameter in *parameters*.

    Supplied values are validated and coerced to their declared type; missing
    optional parameters take their default.  Names in *supplied* that have no
    definition are ignored.  Any invalid value or missing required parameter
    aborts the whole resolution.
    """
    resolved: dict[str, Any] = {}
    for name, definition in parameters.items():
        if name in supplied:
            value = supplied[name]
            try:
                definition.validate_value(value)
            except ParameterValidationError as exc:
                raise ParameterValueError(name, value, exc.reason) from exc
            resolved[name] = definition.coerce_value(value)
        elif definition.required:
            raise MissingParameterError(name)
        else:
            resolved[name] = definition.default

    ignored = set(supplied) - set(parameters)
    if ignored:
        logger.debug("Ignoring undeclared parameters: %s", sorted(ignored))
    return resolved


def values_or_defaults(
    supplied: Mapping[str, Any], bundle: Bundle
) -> dict[str, Any]:
    """Resolve *supplied* against the parameters declared by *bundle*."""
    return resolve_values(supplied, bundle.parameters)
