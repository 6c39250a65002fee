"""Command-line entry point: JSON program in, Go source out."""

from __future__ import annotations

import json
import logging
import sys

from .context import Options, Translation
from .diagnostics import ConfigurationError, Diagnostics, InternalError
from .generate import generate_program, lower_program
from .middleend.imports import collect_imports
from .model import Program
from .serialize import ProgramFormatError, program_from_dict, serialize

PHASES: list[str] = [
    "imports",
    "lowering",
]

USAGE: str = """\
hcl2go [OPTIONS] [INPUT] [-o OUTPUT]

Reads a typed program (JSON) and writes the equivalent Go program.

Options:
  --stop-at PHASE         Stop after phase and print it as JSON: imports, lowering
  --no-strip-inputs       Keep input conversions inside toJSON arguments
  --gofmt                 Pipe the result through the gofmt binary
  --runtime-import PATH   Import path of the Pulumi Go SDK
  -o, --output FILE       Write output to FILE instead of stdout
  -v, --verbose           Log pipeline progress to stderr
  --help                  Show this help message
"""


class Args:
    """Parsed command-line arguments."""

    def __init__(self) -> None:
        self.stop_at: str | None = None
        self.input_file: str | None = None
        self.output_file: str | None = None
        self.strip_inputs: bool = True
        self.external_gofmt: bool = False
        self.runtime_import: str | None = None
        self.verbose: bool = False

    def options(self) -> Options:
        opts = Options(
            unwrap_serialized_inputs=self.strip_inputs,
            external_gofmt=self.external_gofmt,
        )
        if self.runtime_import is not None:
            opts.runtime_import = self.runtime_import
        return opts


def read_source(input_file: str | None) -> tuple[str, int]:
    """Read source from file or stdin. Returns (source, exit_code) where exit_code 0 means OK."""
    if input_file is not None:
        try:
            with open(input_file, "rb") as f:
                raw = f.read()
        except OSError:
            print("error: cannot open '" + input_file + "'", file=sys.stderr)
            return ("", 1)
    else:
        raw = sys.stdin.buffer.read()
    try:
        return (raw.decode("utf-8"), 0)
    except ValueError:
        print("error: invalid utf-8 in input", file=sys.stderr)
        return ("", 1)


def write_output(output: str, output_file: str | None) -> int:
    """Write output to file or stdout. Returns 0 on success, 1 on error."""
    if output_file is not None:
        try:
            with open(output_file, "w") as f:
                f.write(output)
        except OSError:
            print("error: cannot write '" + output_file + "'", file=sys.stderr)
            return 1
        return 0
    sys.stdout.write(output)
    return 0


def to_json(obj: object) -> str:
    """Serialize object to pretty-printed JSON."""
    return json.dumps(obj, indent=2) + "\n"


def _print_diagnostics(diagnostics: Diagnostics) -> None:
    for d in diagnostics:
        print(repr(d), file=sys.stderr)


def run_pipeline(program: Program, stop_at: str | None, options: Options) -> tuple[int, str]:
    """Run the generator. Returns (exit_code, output)."""
    try:
        if stop_at == "imports":
            ctx = Translation(program, options)
            imports = collect_imports(ctx)
            _print_diagnostics(ctx.diagnostics)
            return (0, to_json(imports.to_dict()))
        if stop_at == "lowering":
            module, diagnostics = lower_program(program, options)
            _print_diagnostics(diagnostics)
            if len(diagnostics.errors()) > 0:
                return (1, "")
            return (0, to_json(serialize(module)))
        files, diagnostics = generate_program(program, options)
    except ConfigurationError as e:
        print("error: " + str(e), file=sys.stderr)
        return (1, "")
    except InternalError as e:
        print("error: " + str(e), file=sys.stderr)
        return (1, "")
    _print_diagnostics(diagnostics)
    if len(diagnostics.errors()) > 0:
        return (1, "")
    return (0, files[options.output_file].decode("utf-8"))


def parse_args(argv: list[str] | None = None) -> Args:
    """Parse command-line arguments, exiting with status 2 on misuse."""
    args = sys.argv[1:] if argv is None else argv
    result = Args()
    i = 0
    while i < len(args):
        arg = args[i]
        if arg == "--help" or arg == "-h":
            print(USAGE, end="")
            sys.exit(0)
        elif arg == "--stop-at":
            if i + 1 >= len(args):
                print("error: --stop-at requires an argument", file=sys.stderr)
                sys.exit(2)
            result.stop_at = args[i + 1]
            i += 2
        elif arg == "--runtime-import":
            if i + 1 >= len(args):
                print("error: --runtime-import requires an argument", file=sys.stderr)
                sys.exit(2)
            result.runtime_import = args[i + 1]
            i += 2
        elif arg == "-o" or arg == "--output":
            if i + 1 >= len(args):
                print("error: " + arg + " requires an argument", file=sys.stderr)
                sys.exit(2)
            result.output_file = args[i + 1]
            i += 2
        elif arg == "--no-strip-inputs":
            result.strip_inputs = False
            i += 1
        elif arg == "--gofmt":
            result.external_gofmt = True
            i += 1
        elif arg == "-v" or arg == "--verbose":
            result.verbose = True
            i += 1
        elif arg.startswith("-") and arg != "-":
            print("error: unknown flag '" + arg + "'", file=sys.stderr)
            sys.exit(2)
        else:
            if result.input_file is not None:
                print("error: unexpected argument '" + arg + "'", file=sys.stderr)
                sys.exit(2)
            result.input_file = None if arg == "-" else arg
            i += 1
    if result.stop_at is not None and result.stop_at not in PHASES:
        print("error: unknown phase '" + result.stop_at + "'", file=sys.stderr)
        sys.exit(2)
    return result


def _configure_logging(verbose: bool) -> None:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
    root = logging.getLogger("hcl2go")
    root.addHandler(handler)
    root.setLevel(logging.DEBUG if verbose else logging.WARNING)


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    _configure_logging(args.verbose)
    source, err = read_source(args.input_file)
    if err != 0:
        return err
    if source.strip() == "":
        print("error: no input provided", file=sys.stderr)
        return 2
    try:
        data = json.loads(source)
    except ValueError as e:
        print("error: invalid JSON: " + str(e), file=sys.stderr)
        return 1
    try:
        program = program_from_dict(data)
    except ProgramFormatError as e:
        print("error: " + str(e), file=sys.stderr)
        return 1
    exit_code, output = run_pipeline(program, args.stop_at, args.options())
    if exit_code != 0:
        return exit_code
    return write_output(output, args.output_file)


if __name__ == "__main__":
    sys.exit(main())
