"""Runtime to file-extension mapping for hot reloading.

The table is plain data: new runtimes are added here or through the
``runtime_file_extensions`` config table, never in the lookup code.
"""

import re
from collections.abc import Iterable, Mapping

_PYTHON = (".py",)
_NODE = (".js", ".mjs", ".cjs", ".ts", ".tsx", ".jsx")
_JAVA = (".java", ".jar", ".class")
_DOTNET = (".cs", ".fs", ".vb", ".dll")

DEFAULT_RUNTIME_FILE_EXTENSIONS: dict[str, tuple[str, ...]] = {
    # Python
    "python": _PYTHON,
    "python3": _PYTHON,
    "python3.8": _PYTHON,
    "python3.9": _PYTHON,
    "python3.10": _PYTHON,
    "python3.11": _PYTHON,
    "python3.12": _PYTHON,
    # Node.js
    "nodejs": _NODE,
    "nodejs18.x": _NODE,
    "nodejs20.x": _NODE,
    "nodejs22.x": _NODE,
    # Java
    "java": _JAVA,
    "java8": _JAVA,
    "java11": _JAVA,
    "java17": _JAVA,
    "java21": _JAVA,
    # .NET
    "dotnet": _DOTNET,
    "dotnet6": _DOTNET,
    "dotnet8": _DOTNET,
    "dotnetcore3.1": _DOTNET,
    # Ruby
    "ruby": (".rb",),
    "ruby3.2": (".rb",),
    "ruby3.3": (".rb",),
    # Go
    "go": (".go",),
    "go1.x": (".go",),
    # Rust (custom runtime)
    "rust": (".rs",),
    # PowerShell
    "powershell": (".ps1", ".psm1", ".psd1"),
}

DEFAULT_FILE_EXTENSIONS: tuple[str, ...] = (
    ".py",
    ".js",
    ".mjs",
    ".cjs",
    ".ts",
    ".java",
    ".cs",
    ".go",
    ".rb",
    ".rs",
)

_TRAILING_DIGITS = re.compile(r"[0-9]+$")


def normalize_extensions(extensions: Iterable[str]) -> tuple[str, ...]:
    """Lower-case extensions, ensure a leading dot and drop duplicates.

    Args:
        extensions: Raw extension strings ("py", ".PY", ".py")

    Returns:
        Ordered tuple of unique extensions like (".py",)
    """
    result: list[str] = []
    for ext in extensions:
        ext = str(ext).strip().lower()
        if not ext:
            continue
        if not ext.startswith("."):
            ext = f".{ext}"
        if ext not in result:
            result.append(ext)
    return tuple(result)


def get_file_extensions_for_runtime(
    runtime: str,
    overrides: Mapping[str, Iterable[str]] | None = None,
    default: Iterable[str] | None = None,
) -> tuple[str, ...]:
    """Get the file extensions to watch for a runtime.

    Lookup order: exact runtime ("python3.12"), base version before the
    first dot ("python3"), family with trailing digits removed ("python"),
    then the fallback set. Matching is case-sensitive.

    Args:
        runtime: Runtime identifier, e.g. "python3.13" or "nodejs20.x"
        overrides: Entries merged over the built-in table (override wins)
        default: Fallback extensions for unknown runtimes

    Returns:
        Tuple of extensions including the leading dot
    """
    table: dict[str, Iterable[str]] = {**DEFAULT_RUNTIME_FILE_EXTENSIONS, **(overrides or {})}
    fallback = tuple(default) if default else DEFAULT_FILE_EXTENSIONS
    runtime = runtime or ""

    if runtime in table:
        return tuple(table[runtime])

    base = runtime.split(".", 1)[0]
    if base and base in table:
        return tuple(table[base])

    family = _TRAILING_DIGITS.sub("", base)
    if family and family in table:
        return tuple(table[family])

    return fallback
