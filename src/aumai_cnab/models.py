"""Pydantic models for aumai-cnab bundle documents."""

from __future__ import annotations

import logging
import re
from typing import Any, Callable, ClassVar

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    SerializerFunctionWrapHandler,
    ValidationInfo,
    field_validator,
    model_serializer,
    model_validator,
)

from .errors import ParameterValidationError

__all__ = [
    "WIRE_CONTEXT",
    "Action",
    "BaseImage",
    "Bundle",
    "Image",
    "ImagePlatform",
    "InvocationImage",
    "Location",
    "LocationRef",
    "Maintainer",
    "ParameterDefinition",
    "ParameterMetadata",
]

logger = logging.getLogger(__name__)

# Validation context key set by the codec: only wire (camelCase) names are
# schema fields, everything else at the top level goes into ``custom``.
WIRE_CONTEXT = "wire"


def _drop_omitted(model: _Document, data: dict[str, Any]) -> dict[str, Any]:
    """Remove the fields *model* declares as omit-if-empty / omit-if-none."""
    for name, field in type(model).model_fields.items():
        for key in (field.alias, name):
            if key is None or key not in data:
                continue
            if name in model.omit_if_empty and not data[key]:
                del data[key]
            elif name in model.omit_if_none and data[key] is None:
                del data[key]
            break
    return data


class _Document(BaseModel):
    """
    Common base for every node of a bundle document.

    Nodes are immutable and accept both wire (camelCase) and attribute
    (snake_case) names on input.  Fields listed in ``omit_if_empty`` are left
    out of serialized output when falsy; fields in ``omit_if_none`` only when
    ``None``.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    omit_if_empty: ClassVar[frozenset[str]] = frozenset()
    omit_if_none: ClassVar[frozenset[str]] = frozenset()

    @model_serializer(mode="wrap")
    def serialize_document(
        self, handler: SerializerFunctionWrapHandler
    ) -> dict[str, Any]:
        return _drop_omitted(self, handler(self))


# ---------------------------------------------------------------------------
# Images
# ---------------------------------------------------------------------------


class ImagePlatform(_Document):
    """The platform an image is built for."""

    omit_if_empty: ClassVar[frozenset[str]] = frozenset({"architecture", "os"})

    architecture: str = ""
    os: str = ""


class BaseImage(_Document):
    """Fields shared by every image kind."""

    omit_if_empty: ClassVar[frozenset[str]] = frozenset(
        {"original_image", "digest", "size", "media_type"}
    )
    omit_if_none: ClassVar[frozenset[str]] = frozenset({"platform"})

    image_type: str = Field(default="", alias="imageType")
    image: str = ""
    original_image: str = Field(default="", alias="originalImage")
    digest: str = ""
    size: int = Field(default=0, ge=0)
    platform: ImagePlatform | None = None
    media_type: str = Field(default="", alias="mediaType")


_BASE_IMAGE_KEYS = frozenset(
    key
    for name, field in BaseImage.model_fields.items()
    for key in (name, field.alias)
    if key is not None
)


class _ImageShape(_Document):
    """
    An entity that owns a ``BaseImage``.

    The base fields travel flattened in the enclosing JSON object; in Python
    they live on the ``base`` attribute.
    """

    base: BaseImage

    @model_validator(mode="before")
    @classmethod
    def gather_base(cls, data: Any) -> Any:
        if not isinstance(data, dict) or "base" in data:
            return data
        own = {k: v for k, v in data.items() if k not in _BASE_IMAGE_KEYS}
        own["base"] = {k: v for k, v in data.items() if k in _BASE_IMAGE_KEYS}
        return own

    @model_serializer(mode="wrap")
    def serialize_document(
        self, handler: SerializerFunctionWrapHandler
    ) -> dict[str, Any]:
        data = _drop_omitted(self, handler(self))
        base = data.pop("base", None) or {}
        return {**base, **data}


class Image(_ImageShape):
    """A container image shipped as part of the bundle."""

    description: str = ""


class InvocationImage(_ImageShape):
    """An image that carries out the bundle's actions."""


# ---------------------------------------------------------------------------
# Locations, maintainers, actions
# ---------------------------------------------------------------------------


class Location(_Document):
    """
    Where a value is written inside the invocation image: a file ``path``,
    an ``env`` variable, both, or neither.
    """

    omit_if_empty: ClassVar[frozenset[str]] = frozenset({"path", "env"})

    path: str = ""
    env: str = ""


class LocationRef(_Document):
    """A location within the invocation package."""

    path: str = ""
    field: str = ""
    media_type: str = Field(default="", alias="mediaType")


class Maintainer(_Document):
    omit_if_empty: ClassVar[frozenset[str]] = frozenset({"email", "url"})

    name: str
    email: str = ""
    url: str = ""


class Action(_Document):
    """A custom (non-core) action."""

    omit_if_empty: ClassVar[frozenset[str]] = frozenset(
        {"modifies", "stateless", "description"}
    )

    modifies: bool = False     # may change the release
    stateless: bool = False    # no credentials, no invocation tracking
    description: str = ""


# ---------------------------------------------------------------------------
# Parameters
# ---------------------------------------------------------------------------

_TRUE_STRINGS = frozenset({"true", "1", "yes"})
_FALSE_STRINGS = frozenset({"false", "0", "no"})
_DECIMAL = re.compile(r"[+-]?[0-9]+")


def _as_int(value: Any) -> int | None:
    """Return *value* as an int, or None when it is not integral."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if isinstance(value, str):
        text = value.strip()
        return int(text) if _DECIMAL.fullmatch(text) else None
    return None


def _as_bool(value: Any) -> bool | None:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        text = value.strip().lower()
        if text in _TRUE_STRINGS:
            return True
        if text in _FALSE_STRINGS:
            return False
    return None


def _check_int(definition: ParameterDefinition, value: Any) -> None:
    number = _as_int(value)
    if number is None:
        raise ParameterValidationError("value is not an integer")
    if definition.min_value is not None and number < definition.min_value:
        raise ParameterValidationError(
            f"value is lower than the minimum value {definition.min_value}"
        )
    if definition.max_value is not None and number > definition.max_value:
        raise ParameterValidationError(
            f"value is higher than the maximum value {definition.max_value}"
        )


def _check_string(definition: ParameterDefinition, value: Any) -> None:
    if not isinstance(value, str):
        raise ParameterValidationError("value is not a string")
    if definition.min_length is not None and len(value) < definition.min_length:
        raise ParameterValidationError(
            f"value is shorter than the minimum length {definition.min_length}"
        )
    if definition.max_length is not None and len(value) > definition.max_length:
        raise ParameterValidationError(
            f"value is longer than the maximum length {definition.max_length}"
        )


def _check_bool(definition: ParameterDefinition, value: Any) -> None:
    if _as_bool(value) is None:
        raise ParameterValidationError("value is not a boolean")


_TYPE_CHECKS: dict[str, Callable[[ParameterDefinition, Any], None]] = {
    "int": _check_int,
    "string": _check_string,
    "bool": _check_bool,
}


class ParameterMetadata(_Document):
    omit_if_empty: ClassVar[frozenset[str]] = frozenset({"description"})

    description: str = ""


class ParameterDefinition(_Document):
    """
    Schema of a single bundle parameter.

    Supported types are ``string``, ``int`` and ``bool``.  Definitions with
    any other type load fine but reject every value.
    """

    omit_if_empty: ClassVar[frozenset[str]] = frozenset(
        {"allowed_values", "required"}
    )
    omit_if_none: ClassVar[frozenset[str]] = frozenset(
        {
            "default",
            "min_value",
            "max_value",
            "min_length",
            "max_length",
            "metadata",
            "destination",
        }
    )

    data_type: str = Field(default="", alias="type")
    default: Any = Field(default=None, alias="defaultValue")
    allowed_values: list[Any] = Field(default_factory=list, alias="allowedValues")
    required: bool = False
    min_value: int | None = Field(default=None, alias="minValue")
    max_value: int | None = Field(default=None, alias="maxValue")
    min_length: int | None = Field(default=None, alias="minLength")
    max_length: int | None = Field(default=None, alias="maxLength")
    metadata: ParameterMetadata | None = None
    destination: Location | None = None

    @field_validator("allowed_values", mode="before")
    @classmethod
    def null_as_empty(cls, value: Any) -> Any:
        return [] if value is None else value

    def validate_value(self, value: Any) -> None:
        """
        Check a raw value against this definition.

        Raises ``ParameterValidationError`` describing the first violation.
        """
        check = _TYPE_CHECKS.get(self.data_type)
        if check is None:
            raise ParameterValidationError(
                f"{self.data_type!r} is not a supported parameter type"
            )
        check(self, value)
        if self.allowed_values and self.coerce_value(value) not in self.allowed_values:
            raise ParameterValidationError(
                "value is not in the list of allowed values"
            )

    def coerce_value(self, value: Any) -> Any:
        """Normalize *value* to the declared type; unconvertible values pass through."""
        if self.data_type == "int":
            number = _as_int(value)
            return value if number is None else number
        if self.data_type == "bool":
            flag = _as_bool(value)
            return value if flag is None else flag
        return value

    def convert_value(self, text: str) -> Any:
        """Parse a command-line string into a value of the declared type."""
        if self.data_type == "string":
            return text
        if self.data_type == "int":
            number = _as_int(text)
            if number is None:
                raise ParameterValidationError(f"{text!r} is not an integer")
            return number
        if self.data_type == "bool":
            flag = _as_bool(text)
            if flag is None:
                raise ParameterValidationError(f"{text!r} is not a boolean")
            return flag
        raise ParameterValidationError(
            f"{self.data_type!r} is not a supported parameter type"
        )


# ---------------------------------------------------------------------------
# Bundle
# ---------------------------------------------------------------------------


class Bundle(_Document):
    """
    A CNAB bundle metadata document.

    Top-level keys the model does not know are kept in ``custom``, the
    extension area whose meaning is defined outside this schema.
    """

    omit_if_empty: ClassVar[frozenset[str]] = frozenset(
        {"keywords", "maintainers", "actions", "custom"}
    )

    name: str = ""
    version: str = ""
    description: str = ""
    keywords: list[str] = Field(default_factory=list)
    maintainers: list[Maintainer] = Field(default_factory=list)
    invocation_images: list[InvocationImage] = Field(
        default_factory=list, alias="invocationImages"
    )
    images: dict[str, Image] = Field(default_factory=dict)
    actions: dict[str, Action] = Field(default_factory=dict)
    parameters: dict[str, ParameterDefinition] = Field(default_factory=dict)
    credentials: dict[str, Location] = Field(default_factory=dict)
    custom: dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def route_extensions(cls, data: Any, info: ValidationInfo) -> Any:
        if not isinstance(data, dict):
            return data
        if info.context and info.context.get(WIRE_CONTEXT):
            known = {field.alias or name for name, field in cls.model_fields.items()}
        else:
            known = {
                key
                for name, field in cls.model_fields.items()
                for key in (name, field.alias)
                if key is not None
            }
        extra = {k: v for k, v in data.items() if k not in known}
        if not extra:
            return data
        logger.debug("Routing unknown bundle fields into custom: %s", sorted(extra))
        kept = {k: v for k, v in data.items() if k in known}
        declared = kept.get("custom")
        if declared is not None and not isinstance(declared, dict):
            return kept
        kept["custom"] = {**extra, **(declared or {})}
        return kept

    @field_validator("keywords", "maintainers", "invocation_images", mode="before")
    @classmethod
    def null_list(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator(
        "images", "actions", "parameters", "credentials", "custom", mode="before"
    )
    @classmethod
    def null_mapping(cls, value: Any) -> Any:
        return {} if value is None else value
