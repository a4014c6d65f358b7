"""objcgen command line.

    objcgen generate --file Header.h [--output-dir DIR] [--strategy text|ast]
    objcgen generate --mode method --string '/*! ... */ // - (void)foo;'
    objcgen reflow src/generated
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from pydantic import ValidationError

from .config import GeneratorSettings
from .errors import MalformedSignature, UnreadableInput, UnwritableOutput
from .extractors import extract_single_method, get_extractor
from .generators import method_to_dict, write_class_modules
from .models import SourceUnit
from .reflow import reflow_path

log = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="objcgen",
        description="Generate Python bindings from Objective-C headers.",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    generate = commands.add_parser("generate", help="Generate bindings from a header")
    source = generate.add_mutually_exclusive_group(required=True)
    source.add_argument("--file", type=Path, help="Header file to read")
    source.add_argument("--string", help="Header text given inline")
    generate.add_argument("--mode", choices=["class", "method"], default=None)
    generate.add_argument("--strategy", choices=["text", "ast"], default=None)
    generate.add_argument("--output-dir", type=Path, default=None)
    generate.add_argument("--bridge-module", default=None)
    generate.add_argument("--libclang", default=None, help="Path to the libclang shared library")
    generate.add_argument("--sdk-root", default=None, help="Platform SDK root passed as -isysroot")
    generate.add_argument(
        "--no-reflow",
        action="store_true",
        help="Skip overload reflow of the written modules",
    )
    generate.add_argument("-v", "--verbose", action="store_true")

    reflow = commands.add_parser("reflow", help="Normalize overload layout of generated modules")
    reflow.add_argument("path", type=Path, help="Generated file or directory")
    reflow.add_argument("-v", "--verbose", action="store_true")

    return parser.parse_args(argv)


def _read_source(args: argparse.Namespace) -> SourceUnit:
    if args.string is not None:
        return SourceUnit(text=args.string)
    try:
        return SourceUnit(text=args.file.read_text(), path=str(args.file))
    except (OSError, UnicodeDecodeError) as e:
        raise UnreadableInput(f"Cannot read {args.file}: {e}", str(args.file)) from e


def run_generate(args: argparse.Namespace) -> int:
    try:
        settings = GeneratorSettings.from_env(
            mode=args.mode,
            strategy=args.strategy,
            output_dir=args.output_dir,
            bridge_module=args.bridge_module,
            libclang_path=args.libclang,
            sdk_root=args.sdk_root,
            reflow=False if args.no_reflow else None,
        )
    except ValidationError as e:
        print(f"✗ Invalid settings:\n{e}", file=sys.stderr)
        return 1

    unit = _read_source(args)

    if settings.mode == "method":
        try:
            method = extract_single_method(unit.text)
        except MalformedSignature as e:
            print(f"✗ {e}", file=sys.stderr)
            return 1
        print(json.dumps(method_to_dict(method), indent=2))
        return 0

    result = get_extractor(settings).extract(unit)
    print(f"✓ Found {len(result.classes)} classes.")
    if result.skipped:
        print(f"⚠ Skipped {result.skipped} declarations (see warnings).")

    source = Path(unit.path).name if unit.path else None
    for path in write_class_modules(result, settings, source):
        print(f"  ✓ Generated {path.name}")
    return 0


def run_reflow(args: argparse.Namespace) -> int:
    changed = reflow_path(args.path)
    for path in changed:
        print(f"  ✓ Post-processed {path}")
    print(f"✓ {len(changed)} files changed.")
    return 0


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        if args.command == "generate":
            return run_generate(args)
        return run_reflow(args)
    except (UnreadableInput, UnwritableOutput) as e:
        print(f"✗ {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
