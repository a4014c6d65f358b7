"""Tests for generator settings and runtime support."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from objcgen.config import GeneratorSettings
from objcgen.runtime import UNSET, NativeObject


class TestGeneratorSettings:
    """Test settings defaults and validation."""

    def test_defaults(self):
        """Default settings use text extraction and the standard bridge."""
        settings = GeneratorSettings()
        assert settings.mode == "class"
        assert settings.strategy == "text"
        assert settings.output_dir == Path("src") / "generated"
        assert settings.bridge_module == "objc_bridge"
        assert settings.reflow is True

    def test_ast_strategy_requires_libclang(self):
        """The ast strategy needs a libclang path."""
        with pytest.raises(ValidationError, match="libclang_path"):
            GeneratorSettings(strategy="ast")

    def test_ast_strategy_with_libclang(self):
        """The ast strategy is accepted with a libclang path."""
        settings = GeneratorSettings(strategy="ast", libclang_path="/usr/lib/libclang.so")
        assert settings.strategy == "ast"

    @pytest.mark.parametrize("name", ["my bridge", "1bridge", "bridge.", ""])
    def test_invalid_bridge_module(self, name):
        """Bridge module names must be importable identifiers."""
        with pytest.raises(ValidationError):
            GeneratorSettings(bridge_module=name)

    def test_dotted_bridge_module(self):
        """Dotted bridge module names are accepted."""
        assert GeneratorSettings(bridge_module="pkg.bridge").bridge_module == "pkg.bridge"

    def test_unknown_mode_rejected(self):
        """Unknown generation modes are rejected."""
        with pytest.raises(ValidationError):
            GeneratorSettings(mode="module")


class TestFromEnv:
    """Test environment defaults and overrides."""

    def test_reads_environment(self, monkeypatch, tmp_path):
        """Settings pick up values from the environment."""
        monkeypatch.setenv("LIBCLANG_PATH", "/opt/llvm/lib/libclang.so")
        monkeypatch.setenv("OBJCGEN_SDK_ROOT", "/sdk")
        monkeypatch.setenv("OBJCGEN_OUTPUT_DIR", str(tmp_path))
        settings = GeneratorSettings.from_env()
        assert settings.libclang_path == "/opt/llvm/lib/libclang.so"
        assert settings.sdk_root == "/sdk"
        assert settings.output_dir == tmp_path

    def test_overrides_win_and_none_ignored(self, monkeypatch):
        """Explicit overrides beat the environment unless None."""
        monkeypatch.setenv("OBJCGEN_SDK_ROOT", "/sdk")
        settings = GeneratorSettings.from_env(sdk_root="/other", mode=None, reflow=False)
        assert settings.sdk_root == "/other"
        assert settings.mode == "class"
        assert settings.reflow is False

    def test_ast_without_library_fails(self, monkeypatch):
        """Choosing ast with no library configured fails validation."""
        monkeypatch.delenv("LIBCLANG_PATH", raising=False)
        with pytest.raises(ValidationError):
            GeneratorSettings.from_env(strategy="ast")


class TestRuntime:
    """Test symbols imported by generated modules."""

    def test_unset_repr(self):
        """The UNSET sentinel has a readable repr."""
        assert repr(UNSET) == "UNSET"

    def test_from_pointer_skips_initializer(self):
        """Wrapping a pointer does not run __init__."""
        class Wrapped(NativeObject):
            def __init__(self):
                raise AssertionError("initializer must not run")

        wrapped = Wrapped.from_pointer(0x1234)
        assert wrapped.to_pointer() == 0x1234
        assert repr(wrapped) == "<Wrapped 4660>"
