"""Shared test fixtures for aumai-cnab."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from aumai_cnab.models import (
    Action,
    BaseImage,
    Bundle,
    Image,
    ImagePlatform,
    InvocationImage,
    Location,
    Maintainer,
    ParameterDefinition,
)


# ---------------------------------------------------------------------------
# Raw documents
# ---------------------------------------------------------------------------


@pytest.fixture()
def bundle_document() -> dict[str, Any]:
    """A complete bundle document in wire (camelCase) form."""
    return {
        "name": "helloworld",
        "version": "0.1.2",
        "description": "An example hello world bundle",
        "keywords": ["hello", "example"],
        "maintainers": [
            {"name": "Jane Doe", "email": "jane@example.com", "url": "https://example.com"},
            {"name": "Ops Team"},
        ],
        "invocationImages": [
            {
                "imageType": "docker",
                "image": "example/helloworld-cnab:0.1.2",
                "digest": "sha256:" + "a" * 64,
                "size": 1024,
                "platform": {"architecture": "amd64", "os": "linux"},
            }
        ],
        "images": {
            "web": {
                "imageType": "oci",
                "image": "example/web:1.0",
                "description": "frontend service",
            }
        },
        "actions": {
            "status": {"stateless": True, "description": "Report status"},
            "migrate": {"modifies": True},
        },
        "parameters": {
            "port": {"type": "int", "defaultValue": 8080, "minValue": 1, "maxValue": 65535},
            "greeting": {"type": "string", "defaultValue": "hello", "maxLength": 20},
            "debug": {"type": "bool", "defaultValue": False},
            "token": {
                "type": "string",
                "required": True,
                "metadata": {"description": "API token"},
                "destination": {"env": "TOKEN"},
            },
        },
        "credentials": {
            "kubeconfig": {"path": "/root/.kube/config"},
            "password": {"env": "PASSWORD"},
        },
        "custom": {"com.example.backup": {"enabled": True}},
    }


# ---------------------------------------------------------------------------
# Model fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def full_bundle(bundle_document: dict[str, Any]) -> Bundle:
    return Bundle.model_validate(bundle_document)


@pytest.fixture()
def minimal_bundle() -> Bundle:
    return Bundle(
        name="minimal",
        version="1.0.0",
        invocation_images=[
            InvocationImage(base=BaseImage(image_type="docker", image="example/minimal:1.0"))
        ],
    )


@pytest.fixture()
def programmatic_bundle() -> Bundle:
    """A bundle built in Python using attribute names only."""
    return Bundle(
        name="built",
        version="2.0.0",
        description="built in code",
        maintainers=[Maintainer(name="Someone", email="someone@example.com")],
        invocation_images=[
            InvocationImage(
                base=BaseImage(
                    image_type="oci",
                    image="example/built:2.0",
                    original_image="upstream/built:2.0",
                    platform=ImagePlatform(architecture="arm64"),
                )
            )
        ],
        images={
            "db": Image(
                base=BaseImage(image_type="docker", image="postgres:16", size=42),
                description="database",
            )
        },
        actions={"dry-run": Action(stateless=True)},
        parameters={
            "replicas": ParameterDefinition(data_type="int", default=3),
        },
        credentials={"token": Location(env="TOKEN")},
        custom={"io.example": [1, 2, 3]},
    )


# ---------------------------------------------------------------------------
# Files
# ---------------------------------------------------------------------------


@pytest.fixture()
def bundle_file(tmp_path: Path, bundle_document: dict[str, Any]) -> Path:
    path = tmp_path / "bundle.json"
    path.write_text(json.dumps(bundle_document, indent=2), encoding="utf-8")
    return path
