"""Program generation entry point: Program -> {"main.go": bytes}."""

from __future__ import annotations

import logging

from .backend.go import emit_go
from .backend.gofmt import format_source
from .context import Options, Translation
from .diagnostics import Diagnostics
from .ir import Module
from .middleend import build_module
from .model import Program

logger = logging.getLogger(__name__)


def lower_program(program: Program, options: Options | None = None) -> tuple[Module, Diagnostics]:
    """Run the middleend only: imports, lowering and statement emission.

    Raises ConfigurationError when package metadata is missing.
    """
    ctx = Translation(program, options)
    module = build_module(ctx)
    logger.debug(
        "lowered %d nodes into %d statements (%d utility, %d provider imports)",
        len(program.nodes),
        len(module.body),
        len(module.utility_imports),
        len(module.provider_imports),
    )
    return (module, ctx.diagnostics)


def generate_program(
    program: Program, options: Options | None = None
) -> tuple[dict[str, bytes], Diagnostics]:
    """Generate the Go program for a linearized, typed node list.

    Returns the output files and the accumulated diagnostics. Raises
    ConfigurationError for inconsistent input and InternalError when the
    generated text is not valid Go; neither produces partial output.
    """
    if options is None:
        options = Options()
    module, diagnostics = lower_program(program, options)
    source = emit_go(module)
    formatted = format_source(source, external=options.external_gofmt)
    logger.debug("rendered %s (%d bytes)", options.output_file, len(formatted))
    files = {options.output_file: formatted.encode("utf-8")}
    return (files, diagnostics)
