"""Exception types for aumai-cnab."""

from __future__ import annotations

from typing import Any

__all__ = [
    "BundleError",
    "DecodeError",
    "EncodeError",
    "MissingParameterError",
    "MissingTagError",
    "NoInvocationImageError",
    "ParameterValidationError",
    "ParameterValueError",
    "ReservedVersionError",
    "ResolutionError",
    "StructuralError",
]


class BundleError(Exception):
    """Base class for every error raised by aumai-cnab."""


class DecodeError(BundleError, ValueError):
    """The input bytes are not a well-formed bundle document."""


class EncodeError(BundleError, ValueError):
    """A bundle could not be rendered to its canonical encoding."""


# ---------------------------------------------------------------------------
# Structural validation
# ---------------------------------------------------------------------------


class StructuralError(BundleError, ValueError):
    """The bundle breaks a document-level or image-level invariant."""


class NoInvocationImageError(StructuralError):
    def __init__(self) -> None:
        super().__init__(
            "at least one invocation image must be defined in the bundle"
        )


class ReservedVersionError(StructuralError):
    def __init__(self, version: str = "latest") -> None:
        self.version = version
        super().__init__(f"{version!r} is not a valid bundle version")


class MissingTagError(StructuralError):
    def __init__(self, image: str) -> None:
        self.image = image
        super().__init__(f"tag is required (image {image!r})")


# ---------------------------------------------------------------------------
# Parameters
# ---------------------------------------------------------------------------


class ParameterValidationError(BundleError, ValueError):
    """A raw value does not satisfy a parameter definition."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(reason)


class ResolutionError(BundleError, ValueError):
    """Parameter resolution failed for the parameter *name*."""

    def __init__(self, name: str, message: str) -> None:
        self.name = name
        super().__init__(message)


class ParameterValueError(ResolutionError):
    def __init__(self, name: str, value: Any, reason: str) -> None:
        self.value = value
        self.reason = reason
        super().__init__(name, f"can't use {value!r} as value of {name}: {reason}")


class MissingParameterError(ResolutionError):
    def __init__(self, name: str) -> None:
        super().__init__(name, f"parameter {name!r} is required")
