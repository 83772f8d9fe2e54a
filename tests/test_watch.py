import logging
from pathlib import Path

from sssg.minifiers import create_identity_registry
from sssg.watch import SourceWatcher, _ChangeHandler


class DummyEvent:
    def __init__(self, path, is_directory=False, dest_path=""):
        self.src_path = path
        self.dest_path = dest_path
        self.is_directory = is_directory


def create_project(tmp_path: Path) -> Path:
    (tmp_path / "htdocs").mkdir()
    (tmp_path / "templates").mkdir()
    (tmp_path / "templates" / "base.tmpl").write_text("<b>{{x}}</b>", encoding="utf-8")
    (tmp_path / "htdocs" / "p.html.src").write_text(
        '[config]\ntemplate = "base.tmpl"\n[plaintext]\nx = "1"\n', encoding="utf-8"
    )
    return tmp_path


def test_is_relevant(tmp_path):
    watcher = SourceWatcher(create_project(tmp_path))
    assert watcher.is_relevant(tmp_path / "htdocs" / "p.html.src")
    assert watcher.is_relevant(tmp_path / "templates" / "base.tmpl")
    assert not watcher.is_relevant(tmp_path / "htdocs" / "p.html")
    assert not watcher.is_relevant(tmp_path / "htdocs" / ".p.html.abc.tmp")


def test_change_handler_filters_events(tmp_path):
    watcher = SourceWatcher(create_project(tmp_path))
    calls = []
    watcher.rebuild = lambda: calls.append("rebuild")
    handler = _ChangeHandler(watcher)

    handler.on_any_event(DummyEvent(str(tmp_path / "htdocs" / "p.html")))
    handler.on_any_event(DummyEvent(str(tmp_path / "htdocs"), is_directory=True))
    assert calls == []

    handler.on_any_event(DummyEvent(str(tmp_path / "htdocs" / "p.html.src")))
    handler.on_any_event(
        DummyEvent(
            str(tmp_path / "htdocs" / ".tmp"),
            dest_path=str(tmp_path / "templates" / "base.tmpl"),
        )
    )
    assert calls == ["rebuild", "rebuild"]


def test_rebuild_writes_artifacts(tmp_path):
    project = create_project(tmp_path)
    watcher = SourceWatcher(project, minifiers=create_identity_registry())
    assert watcher.rebuild(force=True) is True
    assert (project / "htdocs" / "p.html").read_text(encoding="utf-8") == "<b>1</b>"


def test_rebuild_logs_errors_and_keeps_going(tmp_path, caplog):
    project = create_project(tmp_path)
    (project / "htdocs" / "bad.html.src").write_text("[config", encoding="utf-8")
    watcher = SourceWatcher(project, minifiers=create_identity_registry())

    with caplog.at_level(logging.ERROR, logger="sssg.watch"):
        assert watcher.rebuild(force=True) is False

    assert any("bad.html.src" in r.getMessage() for r in caplog.records)
    assert (project / "htdocs" / "p.html").exists()


def fake_build_site(calls, on_build=None):
    def build_site(*args, **kwargs):
        calls.append("built")
        if on_build:
            on_build(len(calls))
        return type("R", (), {"artifacts": []})()

    return build_site


def test_rebuild_skips_unchanged_sources(monkeypatch, tmp_path):
    project = create_project(tmp_path)
    watcher = SourceWatcher(project)
    calls = []
    monkeypatch.setattr("sssg.watch.build_site", fake_build_site(calls))

    assert watcher.rebuild(force=True) is True
    assert watcher.rebuild() is False  # nothing changed
    (project / "htdocs" / "p.html").write_text("artifact", encoding="utf-8")
    assert watcher.rebuild() is False  # artifacts are not inputs
    (project / "templates" / "base.tmpl").write_text("<em>{{x}}</em>", encoding="utf-8")
    assert watcher.rebuild() is True
    assert watcher.rebuild(force=True) is True
    assert calls == ["built", "built", "built"]


def test_rebuild_while_running_is_deferred(monkeypatch, tmp_path):
    watcher = SourceWatcher(create_project(tmp_path))
    calls = []
    monkeypatch.setattr("sssg.watch.build_site", fake_build_site(calls))

    watcher._rebuilding = True
    assert watcher.rebuild() is False
    assert calls == []
    assert watcher._pending is True


def test_change_during_build_triggers_another_build(monkeypatch, tmp_path):
    project = create_project(tmp_path)
    watcher = SourceWatcher(project)
    calls = []

    def save_during_build(count):
        if count == 1:
            # The user saves again while the first build is still running.
            (project / "htdocs" / "p.html.src").write_text(
                '[config]\ntemplate = "base.tmpl"\n[plaintext]\nx = "22"\n',
                encoding="utf-8",
            )
            assert watcher.rebuild() is False

    monkeypatch.setattr("sssg.watch.build_site", fake_build_site(calls, save_during_build))

    assert watcher.rebuild(force=True) is True
    assert calls == ["built", "built"]
    assert watcher._pending is False
    assert watcher._rebuilding is False

    # The follow-up build saw the latest save, so nothing is left to do.
    assert watcher.rebuild() is False
    assert calls == ["built", "built"]


def test_stop_without_observer(tmp_path):
    watcher = SourceWatcher(tmp_path)
    watcher.stop()
    assert watcher._observer is None
