"""Generator settings.

Values come from explicit overrides (CLI flags) with environment fallbacks:

    LIBCLANG_PATH      shared library used by the AST strategy
    OBJCGEN_SDK_ROOT   platform SDK root passed to clang as -isysroot
    OBJCGEN_OUTPUT_DIR generated-output directory
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator, model_validator

DEFAULT_OUTPUT_DIR = Path("src") / "generated"
DEFAULT_BRIDGE_MODULE = "objc_bridge"

_DOTTED_NAME = re.compile(r"^[A-Za-z_]\w*(\.[A-Za-z_]\w*)*$")


class GeneratorSettings(BaseModel):
    mode: Literal["class", "method"] = "class"
    strategy: Literal["text", "ast"] = "text"
    output_dir: Path = DEFAULT_OUTPUT_DIR
    bridge_module: str = DEFAULT_BRIDGE_MODULE
    libclang_path: str | None = None
    sdk_root: str | None = None
    clang_args: list[str] = Field(default_factory=list)
    reflow: bool = True

    @field_validator("bridge_module")
    @classmethod
    def _check_bridge_module(cls, value: str) -> str:
        if not _DOTTED_NAME.match(value):
            raise ValueError(f"Invalid bridge module name: {value!r}")
        return value

    @model_validator(mode="after")
    def _check_ast_requirements(self) -> "GeneratorSettings":
        if self.strategy == "ast" and not self.libclang_path:
            raise ValueError(
                "The ast strategy needs libclang_path (or LIBCLANG_PATH) to be set"
            )
        return self

    @classmethod
    def from_env(cls, **overrides: Any) -> "GeneratorSettings":
        """Build settings from environment defaults, then explicit overrides.

        Overrides set to None are ignored so unset CLI flags fall through.
        """
        values: dict[str, Any] = {}
        if os.environ.get("LIBCLANG_PATH"):
            values["libclang_path"] = os.environ["LIBCLANG_PATH"]
        if os.environ.get("OBJCGEN_SDK_ROOT"):
            values["sdk_root"] = os.environ["OBJCGEN_SDK_ROOT"]
        if os.environ.get("OBJCGEN_OUTPUT_DIR"):
            values["output_dir"] = os.environ["OBJCGEN_OUTPUT_DIR"]
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
