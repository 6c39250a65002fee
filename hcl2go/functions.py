"""Built-in function metadata: utility imports and calling conventions."""

from __future__ import annotations

from .model import Call, Expr

INVOKE = "invoke"
TO_JSON = "toJSON"

# Function name -> Go standard library packages its rendering needs.
FUNCTION_PACKAGES: dict[str, tuple[str, ...]] = {
    "fileArchive": (),
    "fileAsset": (),
    INVOKE: (),
    "element": (),
    "length": (),
    "join": ("strings",),
    "split": ("strings",),
    "mimeType": ("mime", "path"),
    "readDir": ("io/ioutil",),
    "readFile": ("io/ioutil",),
    "sha1": ("crypto/sha1", "fmt"),
    "toBase64": ("encoding/base64",),
    TO_JSON: ("encoding/json",),
}

# Calls rendered as `v, err := f(...)` followed by an error check.
FALLIBLE_FUNCTIONS: frozenset[str] = frozenset({INVOKE})

# Calls whose Go result is already an SDK input and is never wrapped.
INPUT_FUNCTIONS: frozenset[str] = frozenset({"fileArchive", "fileAsset"})


def function_packages(name: str, table: dict[str, tuple[str, ...]] | None = None) -> tuple[str, ...]:
    """Utility packages required by a call to name (empty if unknown)."""
    if table is None:
        table = FUNCTION_PACKAGES
    return table.get(name, ())


def is_known_function(name: str, table: dict[str, tuple[str, ...]] | None = None) -> bool:
    if table is None:
        table = FUNCTION_PACKAGES
    return name in table


def is_fallible_call(expr: Expr) -> bool:
    """Check if expr is an invoke-style call whose result must be error-checked."""
    return isinstance(expr, Call) and expr.name in FALLIBLE_FUNCTIONS
