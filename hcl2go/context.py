"""Per-translation state: options, temp-name allocation and diagnostics.

One Translation is created for each generate_program call and passed
explicitly through every pass. Nothing here is process-wide.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .backend.util import go_to_camel
from .diagnostics import Diagnostics
from .functions import FUNCTION_PACKAGES
from .model import Program

RUNTIME_IMPORT = "github.com/pulumi/pulumi/sdk/v2/go/pulumi"
PROVIDER_IMPORT_TEMPLATE = "github.com/pulumi/pulumi-{pkg}/sdk{version}/go/{pkg}"


@dataclass
class Options:
    """Generator configuration."""

    runtime_import: str = RUNTIME_IMPORT
    provider_import_template: str = PROVIDER_IMPORT_TEMPLATE
    function_packages: dict[str, tuple[str, ...]] = field(
        default_factory=lambda: dict(FUNCTION_PACKAGES)
    )
    # Remove input wrappers from toJSON arguments before serializing them.
    unwrap_serialized_inputs: bool = True
    # Pipe the rendered source through the gofmt binary.
    external_gofmt: bool = False
    output_file: str = "main.go"


class NameAllocator:
    """Hands out program-unique temporary names.

    Each prefix has its own counter. Candidates already taken (by a node or
    an earlier temp) are skipped.
    """

    def __init__(self, reserved: set[str] | None = None) -> None:
        self._taken: set[str] = set(reserved) if reserved is not None else set()
        self._counters: dict[str, int] = {}

    def reserve(self, name: str) -> None:
        self._taken.add(name)

    def is_taken(self, name: str) -> bool:
        return name in self._taken

    def fresh(self, prefix: str) -> str:
        n = self._counters.get(prefix, 0)
        while True:
            candidate = prefix + str(n)
            n += 1
            if candidate not in self._taken:
                break
        self._counters[prefix] = n
        self._taken.add(candidate)
        return candidate


class Translation:
    """State for one translation run."""

    def __init__(self, program: Program, options: Options | None = None) -> None:
        self.program: Program = program
        self.options: Options = options if options is not None else Options()
        self.diagnostics: Diagnostics = Diagnostics()
        reserved = {"ctx", "err"}
        for name in program.node_names():
            reserved.add(name)
            reserved.add(go_to_camel(name))
        self.names: NameAllocator = NameAllocator(reserved)
        self._reported: set[str] = set()

    def warn_once(self, key: str, subject: str, summary: str) -> None:
        """Add a warning unless one with the same key was already reported."""
        if key in self._reported:
            return
        self._reported.add(key)
        self.diagnostics.add_warning(subject, summary)
