import pytest

from sssg.errors import FileError, UnresolvedPlaceholderError
from sssg.templates import find_placeholders, load_template, substitute


def test_find_placeholders_in_scan_order():
    body = "{{b}} {{ a }} {{b}} {not} {{ 1bad }}"
    assert find_placeholders(body) == ["b", "a", "b"]


def test_substitute_replaces_every_occurrence():
    body = "<title>{{p1}}</title><h1>{{p1}}</h1><p>{{ p2 }}</p>"
    out = substitute(body, {"p1": "One", "p2": "Two", "unused": "x"})
    assert out == "<title>One</title><h1>One</h1><p>Two</p>"
    assert "{{" not in out and "}}" not in out


def test_substitute_reports_first_missing_placeholder():
    with pytest.raises(UnresolvedPlaceholderError) as excinfo:
        substitute("{{a}} {{zeta}} {{alpha}}", {"a": "1"})
    assert excinfo.value.name == "zeta"
    assert str(excinfo.value) == "zeta"


def test_substitute_does_not_expand_values():
    out = substitute("{{a}}", {"a": "{{b}}", "b": "nope"})
    assert out == "{{b}}"


def test_substitute_is_content_type_agnostic():
    css = "body { color: {{color}}; }"
    assert substitute(css, {"color": "red"}) == "body { color: red; }"
    js = "const x = '{{ name }}'; if (a) { b(); }"
    assert substitute(js, {"name": "n"}) == "const x = 'n'; if (a) { b(); }"


def test_substitute_value_with_backslashes():
    assert substitute("{{a}}", {"a": r"\1 \g<0>"}) == r"\1 \g<0>"


def test_load_template_reads_fresh(tmp_path):
    (tmp_path / "base.tmpl").write_text("one", encoding="utf-8")
    assert load_template(tmp_path, "base.tmpl") == "one"
    (tmp_path / "base.tmpl").write_text("two", encoding="utf-8")
    assert load_template(tmp_path, "base.tmpl") == "two"


def test_load_template_missing(tmp_path):
    with pytest.raises(FileError) as excinfo:
        load_template(tmp_path, "nope.tmpl")
    assert excinfo.value.source_path == tmp_path / "nope.tmpl"
    assert "Error reading template file" in excinfo.value.message
