"""Source document handling for sssg.

A source document is any file named ``<name>.<kind>.src`` below the htdocs
directory. The kind decides how it is generated:

- ``css`` and ``js`` sources are opaque text handed straight to a minifier.
- ``html`` sources are TOML documents with three optional tables:
  ``config`` (build directives, currently only ``template``), ``plaintext``
  (placeholder to literal text) and ``markdown`` (placeholder to markdown).

Key items:
- SourceKind: The three recognised kinds.
- SourceDocument: Parsed sections of an HTML source.
- iter_sources: Discover source files.
- resolve_kind: Determine the kind from a file name.
- artifact_path: Where the generated file for a source lives.
- parse_document: Parse an HTML source into its sections.
"""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any

from .errors import ConfigError, KindError, ParseError

if TYPE_CHECKING:
    from .renderers import MarkdownRenderer

MARKER_SUFFIX = ".src"

SECTIONS = ("config", "plaintext", "markdown")


class SourceKind(str, Enum):
    """Kind of a source document, taken from its inner extension."""

    CSS = "css"
    HTML = "html"
    JS = "js"


@dataclass
class SourceDocument:
    """Parsed sections of an HTML source document.

    Attributes:
        path: Path to the source file.
        config: Build directives.
        plaintext: Placeholder name to literal value.
        markdown: Placeholder name to markdown source.
    """

    path: Path
    config: dict[str, str] = field(default_factory=dict)
    plaintext: dict[str, str] = field(default_factory=dict)
    markdown: dict[str, str] = field(default_factory=dict)

    @property
    def template_name(self) -> str:
        """Name of the template this document is rendered into.

        Raises:
            ConfigError: If ``config.template`` is missing or empty.
        """
        name = self.config.get("template", "")
        if not name:
            raise ConfigError(
                self.path, "Template file not defined in 'config' section"
            )
        return name

    def placeholders(self, renderer: MarkdownRenderer) -> dict[str, str]:
        """Merge plaintext values with rendered markdown values.

        Markdown is merged last, so it wins when a key appears in both.

        Args:
            renderer: Markdown renderer for the ``markdown`` section.

        Returns:
            Placeholder name to final value.
        """
        values = dict(self.plaintext)
        for name, source in self.markdown.items():
            values[name] = renderer.render(source)
        return values


def iter_sources(root: Path) -> list[Path]:
    """Find every source document below ``root``.

    Args:
        root: Directory to search.

    Returns:
        Sorted list of source file paths.
    """
    return sorted(
        path
        for path in root.rglob(f"*{MARKER_SUFFIX}")
        if path.is_file()
    )


def is_source(path: Path) -> bool:
    """Check whether a path names a source document."""
    return path.name.endswith(MARKER_SUFFIX)


def resolve_kind(path: Path) -> SourceKind:
    """Determine the kind of a source from its file name.

    The kind is the dot-delimited component just before the marker suffix,
    so ``page.html.src`` is an HTML source.

    Args:
        path: Path to the source file.

    Returns:
        The source kind.

    Raises:
        KindError: If the component is missing or not a known kind.
    """
    parts = path.name.rsplit(".", 2)
    token = parts[-2] if len(parts) == 3 else None
    try:
        return SourceKind(token)
    except ValueError:
        raise KindError(
            path, f"Filename not in the form <name>.(css|html|js){MARKER_SUFFIX}"
        ) from None


def artifact_path(path: Path) -> Path:
    """Return the artifact path for a source: the source minus its marker."""
    return path.with_name(path.name[: -len(MARKER_SUFFIX)])


def parse_document(text: str, path: Path) -> SourceDocument:
    """Parse an HTML source document.

    Parsing is tolerant: missing sections, or sections that are not tables,
    become empty mappings, and non-string values become empty strings.

    Args:
        text: Raw document text.
        path: Path of the document, for error reporting.

    Returns:
        The parsed SourceDocument.

    Raises:
        ParseError: If the text is not valid TOML.
    """
    try:
        document = tomllib.loads(text)
    except tomllib.TOMLDecodeError as exc:
        raise ParseError(path, f"TOML parse error ({exc})", exc) from exc
    config, plaintext, markdown = (_get_section(name, document) for name in SECTIONS)
    return SourceDocument(
        path=path, config=config, plaintext=plaintext, markdown=markdown
    )


def _get_section(name: str, document: dict[str, Any]) -> dict[str, str]:
    section = document.get(name)
    if not isinstance(section, dict):
        return {}
    return {
        key: value if isinstance(value, str) else ""
        for key, value in section.items()
    }
