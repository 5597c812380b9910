"""
aumai-cnab quickstart: build, encode, validate and parameterize a bundle.

Run directly:

    python examples/quickstart.py

All demos work in memory except Demo 4, which uses a temporary directory.
"""

from __future__ import annotations

import pathlib
import tempfile


# ---------------------------------------------------------------------------
# Demo 1: Build a bundle programmatically
# ---------------------------------------------------------------------------

def demo_build_bundle():
    """Construct a Bundle from model objects."""
    print("\n=== Demo 1: Build a bundle ===")

    from aumai_cnab.models import (
        Action,
        BaseImage,
        Bundle,
        Image,
        InvocationImage,
        Location,
        Maintainer,
        ParameterDefinition,
    )

    bundle = Bundle(
        name="wordpress",
        version="0.3.0",
        description="WordPress with a MySQL backend",
        keywords=["wordpress", "blog"],
        maintainers=[Maintainer(name="Blog Team", email="blog@example.com")],
        invocation_images=[
            InvocationImage(
                base=BaseImage(image_type="docker", image="example/wordpress-cnab:0.3.0")
            )
        ],
        images={
            "mysql": Image(
                base=BaseImage(image_type="docker", image="mysql:8.4"),
                description="database",
            )
        },
        actions={"backup": Action(modifies=False, description="Dump the database")},
        parameters={
            "replicas": ParameterDefinition(data_type="int", default=1, min_value=1),
            "admin_email": ParameterDefinition(data_type="string", required=True),
            "tls": ParameterDefinition(data_type="bool", default=False),
        },
        credentials={"kubeconfig": Location(path="/root/.kube/config")},
    )
    print(f"  Name        : {bundle.name}")
    print(f"  Version     : {bundle.version}")
    print(f"  Parameters  : {sorted(bundle.parameters)}")
    return bundle


# ---------------------------------------------------------------------------
# Demo 2: Canonical encoding
# ---------------------------------------------------------------------------

def demo_encode(bundle) -> bytes:
    """Encode the bundle canonically and decode it back."""
    print("\n=== Demo 2: Canonical encoding ===")

    from aumai_cnab.codec import decode, encode

    data = encode(bundle)
    print(f"  Encoded size : {len(data)} bytes")
    print(f"  Prefix       : {data[:72].decode()}...")
    print(f"  Round trip   : {decode(data) == bundle}")
    return data


# ---------------------------------------------------------------------------
# Demo 3: Structural validation
# ---------------------------------------------------------------------------

def demo_validate(bundle) -> None:
    """Validate a good bundle, then two broken variants."""
    print("\n=== Demo 3: Validate ===")

    from aumai_cnab.core import validate_bundle
    from aumai_cnab.errors import StructuralError
    from aumai_cnab.models import BaseImage, InvocationImage

    validate_bundle(bundle)
    print("  Original bundle      : valid")

    variants = {
        "version=latest": bundle.model_copy(update={"version": "latest"}),
        "untagged image": bundle.model_copy(
            update={
                "invocation_images": [
                    InvocationImage(base=BaseImage(image_type="docker", image="wordpress"))
                ]
            }
        ),
    }
    for label, variant in variants.items():
        try:
            validate_bundle(variant)
        except StructuralError as exc:
            print(f"  {label:<20} : {exc}")


# ---------------------------------------------------------------------------
# Demo 4: Files and parameter resolution
# ---------------------------------------------------------------------------

def demo_resolve(bundle) -> None:
    """Write the bundle to disk, load it back and resolve parameter values."""
    print("\n=== Demo 4: Resolve parameters ===")

    from aumai_cnab.codec import load_file, write_file
    from aumai_cnab.core import values_or_defaults
    from aumai_cnab.errors import ResolutionError

    with tempfile.TemporaryDirectory() as tmp:
        path = pathlib.Path(tmp) / "bundle.json"
        write_file(bundle, path)
        loaded = load_file(path)

    supplied = {"admin_email": "admin@example.com", "replicas": "3", "unused": 1}
    values = values_or_defaults(supplied, loaded)
    print(f"  Supplied : {supplied}")
    print(f"  Resolved : {values}")

    try:
        values_or_defaults({"replicas": 0}, loaded)
    except ResolutionError as exc:
        print(f"  Rejected : {exc}")


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

def main() -> None:
    print("aumai-cnab quickstart demo")
    print("=" * 40)

    bundle = demo_build_bundle()
    demo_encode(bundle)
    demo_validate(bundle)
    demo_resolve(bundle)

    print("\n" + "=" * 40)
    print("All demos completed successfully.")


if __name__ == "__main__":
    main()
