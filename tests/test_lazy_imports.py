"""Tests for the lazy top-level API."""

import pytest

import steeple


@pytest.mark.parametrize("name", steeple.__all__)
def test_public_names_resolve(name: str) -> None:
    assert getattr(steeple, name) is not None


def test_unknown_name() -> None:
    with pytest.raises(AttributeError, match="no attribute 'Nope'"):
        steeple.Nope  # noqa: B018


def test_version() -> None:
    assert steeple.__version__ == "0.1.0"
