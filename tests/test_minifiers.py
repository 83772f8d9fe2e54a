from pathlib import Path

import pytest

from sssg.errors import MinifyError
from sssg.minifiers import (
    BaseMinifier,
    CSSMinifier,
    HTMLMinifier,
    IdentityMinifier,
    JSMinifier,
    MinifierRegistry,
    create_default_registry,
    create_identity_registry,
)
from sssg.sources import SourceKind


class ExplodingMinifier(BaseMinifier):
    def minify(self, text):
        raise ValueError("unbalanced braces")


def test_css_minifier_strips_whitespace_and_comments():
    out = CSSMinifier().minify("/* note */\nbody {\n  color: red;\n}\n")
    assert "note" not in out
    assert "color:red" in out
    assert "\n" not in out


def test_js_minifier():
    out = JSMinifier().minify("function add ( a, b ) {\n  // sum\n  return a + b ;\n}\n")
    assert "// sum" not in out
    assert "return a+b" in out


def test_html_minifier_drops_comments():
    out = HTMLMinifier().minify("<div>\n  <!-- note -->\n  <span>hi</span>\n</div>")
    assert "note" not in out
    assert "<span>hi</span>" in out


def test_default_registry_covers_every_kind():
    registry = create_default_registry()
    assert isinstance(registry.get_minifier(SourceKind.CSS), CSSMinifier)
    assert isinstance(registry.get_minifier(SourceKind.HTML), HTMLMinifier)
    assert isinstance(registry.get_minifier(SourceKind.JS), JSMinifier)


def test_identity_registry():
    registry = create_identity_registry()
    for kind in SourceKind:
        assert isinstance(registry.get_minifier(kind), IdentityMinifier)
        assert registry.minify(kind, " a  b ", Path("x")) == " a  b "


def test_registry_wraps_failures():
    registry = MinifierRegistry()
    registry.register(SourceKind.CSS, ExplodingMinifier())
    with pytest.raises(MinifyError) as excinfo:
        registry.minify(SourceKind.CSS, "body {", Path("htdocs/site.css.src"))
    err = excinfo.value
    assert err.source_path == Path("htdocs/site.css.src")
    assert "css" in err.message
    assert "unbalanced braces" in err.message
    assert isinstance(err.original_error, ValueError)


def test_registry_missing_kind():
    with pytest.raises(KeyError):
        MinifierRegistry().get_minifier(SourceKind.JS)
