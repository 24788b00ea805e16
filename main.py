#!/usr/bin/env python3
"""
Line Calculator
Batch (.math -> .resu) and interactive front ends for the expression engine
"""

import argparse
import logging
import sys
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Callable, List, Optional

from expression_engine import MalformedExpressionError, calculate, format_result

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# ==========================================
# CONFIGURATION
# ==========================================

@dataclass
class RunnerConfig:
    """Settings shared by the batch and interactive runners"""
    input_extension: str = ".math"
    output_extension: str = ".resu"
    exit_command: str = "exit"
    strict: bool = False
    equation_prompt: str = "Enter an equation (or type 'exit' to quit): "
    input_prompt: str = "Enter the input file name (must end with .math): "
    output_prompt: str = "Enter the output file name (must end with .resu): "

@dataclass
class BatchSummary:
    output_path: str
    lines: int = 0
    evaluated: int = 0
    failed: int = 0

def setup_logging(level: str = "WARNING", log_dir: Optional[str] = None):
    """Configure root logging: console always, dated log file when log_dir is set"""
    handlers: List[logging.Handler] = [logging.StreamHandler()]

    if log_dir:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)
        handlers.append(
            logging.FileHandler(log_path / f'linecalc_{datetime.now().strftime("%Y%m%d")}.log')
        )

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format=LOG_FORMAT,
        handlers=handlers,
        force=True
    )

# ==========================================
# VALIDATION
# ==========================================

class FileNameValidator:
    """File name checks for the batch runner"""

    @staticmethod
    def validate_extension(filename: str, extension: str, role: str = "Input") -> str:
        if not filename:
            raise ValueError(f"{role} file name cannot be empty")

        if not filename.endswith(extension):
            raise ValueError(f"{role} file must end with {extension}")

        return filename

# ==========================================
# BATCH RUNNER
# ==========================================

def process_file(input_path: str, output_path: str,
                 config: Optional[RunnerConfig] = None) -> BatchSummary:
    """Evaluate every line of input_path, writing one result line per input line"""
    config = config or RunnerConfig()

    FileNameValidator.validate_extension(input_path, config.input_extension, "Input")
    FileNameValidator.validate_extension(output_path, config.output_extension, "Output")

    summary = BatchSummary(output_path=output_path)

    with open(input_path, 'r', encoding='utf-8') as source, \
            open(output_path, 'w', encoding='utf-8') as sink:
        for line_number, line in enumerate(source, 1):
            expression = line.rstrip('\r\n')
            summary.lines += 1

            try:
                result = calculate(expression, strict=config.strict)
                sink.write(f"{format_result(result)}\n")
                summary.evaluated += 1
            except MalformedExpressionError as e:
                logger.warning(f"{input_path}:{line_number}: {e}")
                sink.write(f"Error: {e}\n")
                summary.failed += 1

    logger.info(
        f"Processed {summary.lines} lines from {input_path} "
        f"({summary.failed} failed)"
    )
    return summary

def run_file_runner(input_path: Optional[str] = None,
                    output_path: Optional[str] = None,
                    config: Optional[RunnerConfig] = None,
                    input_func: Optional[Callable[[str], str]] = None) -> int:
    """Prompt for missing file names, process the file and report; returns an exit code"""
    config = config or RunnerConfig()
    input_func = input_func or input

    try:
        if input_path is None:
            input_path = input_func(config.input_prompt).strip()
        FileNameValidator.validate_extension(input_path, config.input_extension, "Input")

        if output_path is None:
            output_path = input_func(config.output_prompt).strip()
        FileNameValidator.validate_extension(output_path, config.output_extension, "Output")

        summary = process_file(input_path, output_path, config)

    except (ValueError, OSError) as e:
        logger.error(f"Batch run failed: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"Processing complete. Results have been written to {summary.output_path}")
    return 0

# ==========================================
# INTERACTIVE RUNNER
# ==========================================

def run_repl(config: Optional[RunnerConfig] = None,
             input_func: Optional[Callable[[str], str]] = None,
             output_func: Optional[Callable[[str], None]] = None) -> int:
    """Read-evaluate-print loop; stops on the exact exit command, EOF or Ctrl-C"""
    config = config or RunnerConfig()
    input_func = input_func or input
    output_func = output_func or print

    while True:
        try:
            expression = input_func(config.equation_prompt)
        except (EOFError, KeyboardInterrupt):
            output_func("")
            break

        if expression == config.exit_command:
            output_func("Exiting the program.")
            break

        try:
            result = calculate(expression, strict=config.strict)
            output_func(f"Result: {format_result(result)}")
        except MalformedExpressionError as e:
            logger.info(f"Could not evaluate {expression!r}: {e}")
            output_func(f"Error: {e}")

    return 0

# ==========================================
# COMMAND LINE
# ==========================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="linecalc",
        description="Evaluate arithmetic expressions interactively or from .math files"
    )

    parser.add_argument(
        "--strict",
        action="store_true",
        help="Treat leftover operands as a malformed expression"
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (default: WARNING)"
    )
    parser.add_argument(
        "--log-dir",
        type=str,
        default=None,
        help="Directory for a dated log file"
    )

    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("repl", help="Interactive mode (default)")

    file_parser = subparsers.add_parser("file", help="Batch mode: .math in, .resu out")
    file_parser.add_argument("input", nargs="?", help="Input file ending in .math")
    file_parser.add_argument("output", nargs="?", help="Output file ending in .resu")

    return parser

def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level, args.log_dir)

    config = RunnerConfig(strict=args.strict)

    if args.command == "file":
        return run_file_runner(args.input, args.output, config)

    return run_repl(config)

if __name__ == "__main__":
    sys.exit(main())
