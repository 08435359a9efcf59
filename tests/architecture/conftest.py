"""PyTestArch wiring for the zkatom package."""

from pathlib import Path

import pytest
from pytestarch import (
    EvaluableArchitecture,
    LayeredArchitecture,
    get_evaluable_architecture,
)

SRC_DIR = Path(__file__).resolve().parents[2] / "src"
PACKAGE = "zkatom"


def _module(layer: str) -> str:
    # Modules are named from the source root's directory down.
    return f"{SRC_DIR.name}.{PACKAGE}.{layer}"


@pytest.fixture(scope="session")
def evaluable() -> EvaluableArchitecture:
    """Import graph of src/zkatom, factory and CLI included."""
    return get_evaluable_architecture(str(SRC_DIR), str(SRC_DIR / PACKAGE))


@pytest.fixture(scope="session")
def layers() -> LayeredArchitecture:
    """Ports and models, atom protocol, coordination adapters and codecs.

    zkatom.factory and zkatom.cli wire the layers together and belong to
    none of them.
    """
    return (
        LayeredArchitecture()
        .layer("domain")
        .containing_modules([_module("domain")])
        .layer("application")
        .containing_modules([_module("application")])
        .layer("infrastructure")
        .containing_modules([_module("infrastructure")])
    )
