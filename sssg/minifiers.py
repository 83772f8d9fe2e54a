"""Minifiers for sssg.

Each minifier handles a single kind of generated text. The registry routes
finished text to the minifier for its kind and turns minifier failures into
MinifyError with file context.

Key classes:
- BaseMinifier: Interface shared by all minifiers.
- CSSMinifier: Compresses stylesheets with csscompressor.
- JSMinifier: Minifies JavaScript with rjsmin.
- HTMLMinifier: Minifies HTML with minify-html.
- IdentityMinifier: Returns text unchanged.
- MinifierRegistry: Maps each SourceKind to its minifier.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

import csscompressor
import minify_html
import rjsmin

from .errors import MinifyError
from .sources import SourceKind


class BaseMinifier(ABC):
    """Base class for minifiers."""

    @abstractmethod
    def minify(self, text: str) -> str:
        """Return the minified form of ``text``.

        Args:
            text: Complete CSS, JavaScript or HTML source.

        Returns:
            Minified text.
        """
        ...


class CSSMinifier(BaseMinifier):
    """Compresses stylesheets."""

    def minify(self, text: str) -> str:
        return csscompressor.compress(text)


class JSMinifier(BaseMinifier):
    """Minifies JavaScript."""

    def minify(self, text: str) -> str:
        return rjsmin.jsmin(text)


class HTMLMinifier(BaseMinifier):
    """Minifies rendered HTML, including inline styles and scripts."""

    def minify(self, text: str) -> str:
        return minify_html.minify(text, minify_css=True, minify_js=True)


class IdentityMinifier(BaseMinifier):
    """Leaves text untouched. Used when minification is switched off."""

    def minify(self, text: str) -> str:
        return text


class MinifierRegistry:
    """Registry mapping source kinds to minifiers."""

    def __init__(self):
        """Initialize an empty registry."""
        self._minifiers: dict[SourceKind, BaseMinifier] = {}

    def register(self, kind: SourceKind, minifier: BaseMinifier) -> None:
        """Register the minifier for a kind, replacing any previous one."""
        self._minifiers[kind] = minifier

    def get_minifier(self, kind: SourceKind) -> BaseMinifier:
        """Get the minifier for a kind.

        Raises:
            KeyError: If no minifier is registered for ``kind``.
        """
        return self._minifiers[kind]

    def minify(self, kind: SourceKind, text: str, source_path: Path) -> str:
        """Minify text with the minifier registered for its kind.

        Args:
            kind: Kind of the text.
            text: Text to minify.
            source_path: Source file the text came from, for error reporting.

        Returns:
            Minified text.

        Raises:
            MinifyError: If the minifier fails.
        """
        minifier = self.get_minifier(kind)
        try:
            return minifier.minify(text)
        except Exception as exc:
            raise MinifyError(
                source_path, f"Error minifying {kind.value} ({exc})", exc
            ) from exc


def create_default_registry() -> MinifierRegistry:
    """Create a registry with the standard minifier for every kind."""
    registry = MinifierRegistry()
    registry.register(SourceKind.CSS, CSSMinifier())
    registry.register(SourceKind.HTML, HTMLMinifier())
    registry.register(SourceKind.JS, JSMinifier())
    return registry


def create_identity_registry() -> MinifierRegistry:
    """Create a registry that leaves every kind unminified."""
    registry = MinifierRegistry()
    for kind in SourceKind:
        registry.register(kind, IdentityMinifier())
    return registry
