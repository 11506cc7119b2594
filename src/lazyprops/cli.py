"""Command-line interface for the lazyprops generator."""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence
from dataclasses import replace
from pathlib import Path

from lazyprops.compilation import Compilation
from lazyprops.config import GeneratorConfig, load_config
from lazyprops.errors import LazyPropsError
from lazyprops.generator import LazyPropGenerator
from lazyprops.marker import MARKER_SOURCE, MARKER_UNIT_KEY
from lazyprops.merge import merge_compilation
from lazyprops.sink import DirectorySink

logger = logging.getLogger(__name__)

EXIT_USAGE = 2


def _load_generator(args: argparse.Namespace) -> LazyPropGenerator:
    config = load_config(args.config) if args.config is not None else GeneratorConfig()
    if getattr(args, "emit_marker", False) and not config.emit_marker:
        config = replace(config, emit_marker=True)
    return LazyPropGenerator(config=config)


def cmd_generate(args: argparse.Namespace) -> int:
    generator = _load_generator(args)
    compilation = Compilation.from_directory(args.source)
    sink = DirectorySink(directory=args.output)
    units = generator.run(compilation, sink)
    sink.prune("*.g.py", MARKER_UNIT_KEY)
    logger.info(
        "%d unit(s) generated, %d file(s) written, %d removed",
        len(units),
        len(sink.written),
        len(sink.removed),
    )
    return 0


def cmd_build(args: argparse.Namespace) -> int:
    generator = _load_generator(args)
    compilation = Compilation.from_directory(args.source)
    units = generator.generate(compilation)
    merged = merge_compilation(compilation, units)
    sink = DirectorySink(directory=args.output)
    for relative_path, text in merged.items():
        sink.add_source(str(relative_path), text)
    sink.prune("*.py")
    logger.info(
        "%d unit(s) merged into %d module(s), %d file(s) written, %d removed",
        len(units),
        len({unit.namespace for unit in units}),
        len(sink.written),
        len(sink.removed),
    )
    return 0


def cmd_marker(args: argparse.Namespace) -> int:
    if args.output is None:
        sys.stdout.write(MARKER_SOURCE)
    else:
        args.output.write_text(MARKER_SOURCE, encoding="utf-8")
        logger.info("Wrote %s", args.output)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lazyprops",
        description="Generate cached properties from @lazy_prop methods.",
    )
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="store_true", help="log debug output")
    verbosity.add_argument("-q", "--quiet", action="store_true", help="only log errors")
    subparsers = parser.add_subparsers(dest="command", required=True)

    generate = subparsers.add_parser(
        "generate", help="write generated units to a directory, removing stale ones"
    )
    generate.add_argument("source", type=Path, help="source root (the directory on sys.path)")
    generate.add_argument("-o", "--output", type=Path, required=True)
    generate.add_argument("--config", type=Path, help="YAML, JSON or TOML configuration")
    generate.add_argument(
        "--emit-marker", action="store_true", help="also write the standalone marker module"
    )
    generate.set_defaults(handler=cmd_generate)

    build = subparsers.add_parser(
        "build",
        help="copy the sources with generated members merged into their classes, "
        "removing modules no longer in the source tree",
    )
    build.add_argument("source", type=Path, help="source root (the directory on sys.path)")
    build.add_argument("-o", "--output", type=Path, required=True)
    build.add_argument("--config", type=Path, help="YAML, JSON or TOML configuration")
    build.set_defaults(handler=cmd_build)

    marker = subparsers.add_parser("marker", help="print the standalone marker module")
    marker.add_argument("-o", "--output", type=Path)
    marker.set_defaults(handler=cmd_marker)

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        level = logging.DEBUG
    elif args.quiet:
        level = logging.ERROR
    else:
        level = logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    try:
        return args.handler(args)
    except (LazyPropsError, ValueError) as e:
        logger.error("%s", e)
        return EXIT_USAGE
