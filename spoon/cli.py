#!/usr/bin/env python3
"""
Compile Spoon Programs to Haxe-style Classes

Each input file becomes one class named after the file: hello_world.spoon
compiles to HelloWorld.hx.

Usage:
    python -m spoon src/hello_world.spoon --out_dir build
    python -m spoon src/*.spoon --stdout

Exit status:
    0  every file compiled
    1  a file could not be read or has a syntax error
    2  the compiler hit an internal fault
"""

import argparse
import logging
from pathlib import Path
from typing import List, Optional

from .config import load_config
from .src.spoon_compiler import class_name, compile_spoon_file
from .src.spoon_errors import SpoonSyntaxError, UnhandledNodeType, UnrecognizedShape

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_USER_ERROR = 1
EXIT_INTERNAL_ERROR = 2


def compile_file(source: Path, out_dir: Optional[Path], extension: str) -> int:
    """
    Compile one file and write (or print) the result.

    Args:
        source: Spoon source file
        out_dir: Output directory, or None to print to stdout
        extension: Extension of the written file

    Returns:
        Exit status for this file
    """
    try:
        output = compile_spoon_file(source)
    except (OSError, UnicodeDecodeError) as e:
        logger.error(f"Cannot read {source}: {e}")
        return EXIT_USER_ERROR
    except SpoonSyntaxError as e:
        logger.error(f"Syntax error in {source}: {e}")
        return EXIT_USER_ERROR
    except (UnrecognizedShape, UnhandledNodeType) as e:
        logger.error(f"Internal compiler error on {source}: {e}")
        return EXIT_INTERNAL_ERROR

    if out_dir is None:
        print(output)
        return EXIT_OK

    target = out_dir / f"{class_name(source)}{extension}"
    try:
        target.write_text(output + "\n", encoding='utf-8')
    except OSError as e:
        logger.error(f"Cannot write {target}: {e}")
        return EXIT_USER_ERROR

    logger.info(f"  ✓ {source} -> {target}")
    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    config = load_config()

    parser = argparse.ArgumentParser(
        prog="spoon",
        description="Compile Spoon programs to Haxe-style classes",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )

    parser.add_argument(
        'files',
        nargs='+',
        type=Path,
        help='Spoon source files'
    )

    parser.add_argument(
        '--out_dir',
        type=Path,
        default=Path(config.output_dir),
        help='Output directory for compiled files (SPOON_OUTPUT_DIR)'
    )

    parser.add_argument(
        '--stdout',
        action='store_true',
        help='Print compiled output instead of writing files'
    )

    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Enable debug logging'
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else getattr(logging, config.log_level, logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    out_dir = None
    if not args.stdout:
        out_dir = args.out_dir
        out_dir.mkdir(parents=True, exist_ok=True)

    logger.info(f"Compiling {len(args.files)} Spoon file(s)")

    status = EXIT_OK
    for i, source in enumerate(args.files, 1):
        logger.info(f"[{i}/{len(args.files)}] Compiling {source}...")
        status = max(status, compile_file(source, out_dir, config.extension))

    if status != EXIT_OK:
        logger.warning("Compilation finished with errors")

    return status
