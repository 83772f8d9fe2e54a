"""Site building functionality for sssg.

This module walks the htdocs tree, generates an artifact for every source
document and writes it next to the source with the ``.src`` marker removed.
It also removes those artifacts again.

Key functions:
- build_site: Generate every artifact. Fail-fast unless ``keep_going``.
- generate_artifact: Run the pipeline for one source and return the text.
- clean_site: Delete every artifact.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from .config import SiteConfig, load_config
from .errors import (
    BuildError,
    BuildFailures,
    FileError,
    SubstitutionError,
    UnresolvedPlaceholderError,
)
from .minifiers import MinifierRegistry, create_default_registry
from .renderers import MarkdownRenderer, default_markdown_renderer
from .sources import (
    SourceKind,
    artifact_path,
    iter_sources,
    parse_document,
    resolve_kind,
)
from .templates import load_template, substitute
from .utils import write_atomic

logger = logging.getLogger(__name__)


@dataclass
class BuildResult:
    """Result of a build.

    Attributes:
        htdocs_dir: Directory that was built.
        artifacts: Artifacts written, in source order.
    """

    htdocs_dir: Path
    artifacts: list[Path] = field(default_factory=list)


@dataclass
class CleanResult:
    """Result of a clean.

    Attributes:
        htdocs_dir: Directory that was cleaned.
        removed: Artifacts deleted, in source order.
    """

    htdocs_dir: Path
    removed: list[Path] = field(default_factory=list)


def build_site(
    project_root: Path,
    config: SiteConfig | None = None,
    minifiers: MinifierRegistry | None = None,
    renderer: MarkdownRenderer | None = None,
    keep_going: bool = False,
) -> BuildResult:
    """Build every source document below the htdocs directory.

    Each artifact is written only after its whole pipeline succeeded, so a
    failing source leaves any previous artifact in place.

    Args:
        project_root: Root directory of the project.
        config: Optional pre-loaded configuration.
        minifiers: Optional minifier registry (defaults to the standard one).
        renderer: Optional markdown renderer.
        keep_going: Collect errors and continue instead of stopping at the
            first failing source.

    Returns:
        BuildResult listing the written artifacts.

    Raises:
        BuildError: The first failure, when ``keep_going`` is false.
        BuildFailures: All failures, when ``keep_going`` is true.
    """
    config = config or load_config(project_root)
    minifiers = minifiers or create_default_registry()
    renderer = renderer or default_markdown_renderer
    htdocs = _require_htdocs(config)

    result = BuildResult(htdocs_dir=htdocs)
    errors: list[BuildError] = []
    for path in iter_sources(htdocs):
        try:
            result.artifacts.append(build_source(path, config, minifiers, renderer))
        except BuildError as exc:
            if not keep_going:
                raise
            errors.append(exc)
    if errors:
        raise BuildFailures(errors)
    return result


def build_source(
    path: Path,
    config: SiteConfig,
    minifiers: MinifierRegistry,
    renderer: MarkdownRenderer,
) -> Path:
    """Generate and write the artifact for one source.

    Args:
        path: Source document path.
        config: Project configuration.
        minifiers: Minifier registry.
        renderer: Markdown renderer.

    Returns:
        Path of the written artifact.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise FileError(path, f"Error reading file ({exc})", exc) from exc

    kind = resolve_kind(path)
    output = generate_artifact(path, kind, text, config, minifiers, renderer)

    target = artifact_path(path)
    try:
        write_atomic(target, output)
    except OSError as exc:
        raise FileError(path, f"Error writing to '{target}' ({exc})", exc) from exc
    logger.debug("Wrote %s", target)
    return target


def generate_artifact(
    path: Path,
    kind: SourceKind,
    text: str,
    config: SiteConfig,
    minifiers: MinifierRegistry,
    renderer: MarkdownRenderer,
) -> str:
    """Run the generation pipeline for one source.

    Args:
        path: Source document path, for error reporting.
        kind: Kind of the source.
        text: Raw source text.
        config: Project configuration.
        minifiers: Minifier registry.
        renderer: Markdown renderer.

    Returns:
        The minified artifact text.
    """
    if kind is SourceKind.HTML:
        text = _generate_html(path, text, config, renderer)
    return minifiers.minify(kind, text, path)


def _generate_html(
    path: Path, text: str, config: SiteConfig, renderer: MarkdownRenderer
) -> str:
    document = parse_document(text, path)
    values = document.placeholders(renderer)
    template_name = document.template_name
    try:
        template = load_template(config.templates_path, template_name)
    except FileError as exc:
        raise FileError(path, exc.message, exc.original_error) from exc
    try:
        return substitute(template, values)
    except UnresolvedPlaceholderError as exc:
        raise SubstitutionError(
            path, f"Template variable '{exc.name}' is missing its value", exc
        ) from exc


def clean_site(project_root: Path, config: SiteConfig | None = None) -> CleanResult:
    """Delete the artifact of every source document.

    The kind of each source is validated again since clean can run without
    a prior build. A missing artifact is an error.

    Args:
        project_root: Root directory of the project.
        config: Optional pre-loaded configuration.

    Returns:
        CleanResult listing the removed artifacts.

    Raises:
        BuildError: The first failure.
    """
    config = config or load_config(project_root)
    htdocs = _require_htdocs(config)

    result = CleanResult(htdocs_dir=htdocs)
    for path in iter_sources(htdocs):
        resolve_kind(path)
        target = artifact_path(path)
        try:
            target.unlink()
        except OSError as exc:
            raise FileError(
                target, f"Error removing file ({exc})", exc
            ) from exc
        logger.debug("Removed %s", target)
        result.removed.append(target)
    return result


def _require_htdocs(config: SiteConfig) -> Path:
    htdocs = config.htdocs_path
    if not htdocs.is_dir():
        raise FileError(htdocs, "Expected htdocs directory")
    return htdocs
