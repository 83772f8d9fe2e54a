"""Error types for sssg.

Every failure during build or clean is reported as a BuildError subclass
that carries the offending file, a human-readable message and the original
exception. The CLI prints them as a single line and exits non-zero.

Key classes:
- BuildError: Base error with file context.
- ParseError, ConfigError, SubstitutionError, KindError, MinifyError,
  FileError: One subclass per failure category.
- UnresolvedPlaceholderError: Raised by the substitution engine, which
  knows nothing about files.
- BuildFailures: Aggregate raised by a keep-going build.
"""

from __future__ import annotations

from pathlib import Path


class BuildError(Exception):
    """Error during build or clean with file context.

    Attributes:
        source_path: Path to the file that caused the error.
        message: Human-readable error message.
        original_error: The original exception that was caught.
    """

    def __init__(
        self,
        source_path: Path,
        message: str,
        original_error: Exception | None = None,
    ):
        self.source_path = source_path
        self.message = message
        self.original_error = original_error
        super().__init__(f"{source_path}: {message}")


class ParseError(BuildError):
    """The structured source document could not be parsed."""


class ConfigError(BuildError):
    """A required key is missing from the ``config`` section, or the
    project configuration file is invalid."""


class SubstitutionError(BuildError):
    """A template placeholder has no value."""


class KindError(BuildError):
    """The file name does not carry a known kind."""


class MinifyError(BuildError):
    """A minifier rejected its input."""


class FileError(BuildError):
    """Reading, writing or deleting a file failed."""


class UnresolvedPlaceholderError(KeyError):
    """A placeholder in a template has no entry in the value map.

    Attributes:
        name: Name of the first unresolved placeholder.
    """

    def __init__(self, name: str):
        self.name = name
        super().__init__(name)

    def __str__(self) -> str:
        return self.name


class BuildFailures(Exception):
    """Raised at the end of a keep-going build when any source failed.

    Attributes:
        errors: The collected errors, in source order.
    """

    def __init__(self, errors: list[BuildError]):
        self.errors = errors
        super().__init__(f"{len(errors)} source(s) failed to build")
