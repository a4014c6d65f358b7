"""Pytest fixtures for objcgen tests."""

import sys

import pytest

from objcgen.config import GeneratorSettings
from objcgen.extractors import TextExtractor
from objcgen.models import SourceUnit
from tests.helpers import SAMPLE_HEADER, FakeBridge, load_generated


@pytest.fixture
def bridge(monkeypatch):
    """
    Recording bridge installed as the `objc_bridge` module.

    Generated modules import it at load time, so install it before
    importing any of them.
    """
    fake = FakeBridge()
    monkeypatch.setitem(sys.modules, "objc_bridge", fake)
    return fake


@pytest.fixture
def settings(tmp_path):
    """Default settings writing into a per-test directory."""
    return GeneratorSettings(output_dir=tmp_path / "generated")


@pytest.fixture
def sample_result():
    """Extraction result for the sample View/Button header."""
    return TextExtractor().extract(SourceUnit(text=SAMPLE_HEADER, path="View.h"))


@pytest.fixture
def generated(bridge, sample_result, tmp_path, monkeypatch):
    """
    Generated View and Button classes, imported against the recording bridge.

    Example:
        def test_something(generated, bridge):
            view = generated["View"]()
            assert bridge.selectors == ["init"]
    """
    monkeypatch.syspath_prepend(str(tmp_path))
    return load_generated(sample_result, tmp_path)
