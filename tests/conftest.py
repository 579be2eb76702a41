"""Shared fixtures for conftool tests."""

import os
from collections.abc import Callable
from typing import Any

import pytest

from conftool.catalog import Catalog


def _entry(
    name: str,
    depends: list[str] | None = None,
    entrytype: str = "switch",
    default: str | int = "n",
    choices: list[str] | None = None,
    help: str = "",  # noqa: A002
) -> dict[str, Any]:
    return {
        "name": name,
        "depends": depends or [],
        "entrytype": entrytype,
        "default": default,
        "choices": choices,
        "help": help,
    }


@pytest.fixture
def entry() -> Callable[..., dict[str, Any]]:
    """Fixture providing a factory for raw catalog entry dictionaries."""
    return _entry


@pytest.fixture
def chain_catalog() -> Catalog:
    """Catalog where C depends on B and B depends on A, all switches off."""
    return Catalog(
        entries=[
            _entry("A"),
            _entry("B", ["A"]),
            _entry("C", ["B"]),
        ],
    )


@pytest.fixture
def mixed_catalog() -> Catalog:
    """Catalog mixing switches, integers, strings and choices.

    NET depends on BASE (enabled by default); PORT, HOST, MODE and TLS
    depend on NET; CERT depends on TLS.
    """
    return Catalog(
        entries=[
            _entry("BASE", default="y", help="Base support"),
            _entry("NET", ["BASE"], help="Networking"),
            _entry("PORT", ["NET"], entrytype="integer", default=8080, help="Listen port"),
            _entry("HOST", ["NET"], entrytype="string", default="localhost"),
            _entry("MODE", ["NET"], entrytype="string", default="fast", choices=["fast", "safe"]),
            _entry("TLS", ["NET"]),
            _entry("CERT", ["TLS"], entrytype="string", default="cert.pem"),
        ],
    )


@pytest.fixture(autouse=True)
def clean_env_vars(monkeypatch):
    """Clean conftool environment variables before each test."""
    for key in list(os.environ.keys()):
        if key.startswith("CONFTOOL_"):
            monkeypatch.delenv(key, raising=False)
