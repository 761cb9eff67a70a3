"""End-to-end tests of the command line: argv in, one JSON envelope out."""

import io
import json

import pytest

from harness_electron.cli import _peek_command, main
from tests.helpers.dummy_http import devtools_connection
from tests.helpers.fake_page import FakeElement, FakePage, FakePageOpener

pytestmark = pytest.mark.integration


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def devtools(monkeypatch):
    conn = devtools_connection()
    monkeypatch.setattr(
        "harness_electron.adapters.cdp_discovery.http.client.HTTPConnection", conn.factory
    )
    return conn


def run(argv, **overrides):
    out = io.StringIO()
    code = main(argv, stream=out, **overrides)
    lines = out.getvalue().splitlines()
    assert len(lines) == 1, lines
    return code, json.loads(lines[0])


# ── connect / sessions ───────────────────────────────────────────────


class TestConnectFlow:
    def test_connect_creates_session(self, workdir, devtools):
        code, envelope = run(["connect", "--port", "9222"])
        assert code == 0
        assert envelope["ok"] is True
        assert envelope["protocolVersion"] == "1.0"
        assert envelope["command"] == "connect"
        assert envelope["session"] == "default"
        assert envelope["data"]["target"]["id"] == "PAGE1"
        assert (workdir / ".harness-electron" / "sessions" / "default.json").is_file()
        assert devtools.port == 9222

    def test_repeated_connect_without_matching_target(self, workdir, devtools):
        run(["connect", "--port", "9222"])
        code, envelope = run(["connect", "--port", "9222", "--url-contains", "nomatch"])
        assert code == 20
        assert envelope["ok"] is False
        assert envelope["error"]["code"] == "TARGET_NOT_FOUND"
        assert envelope["error"]["retryable"] is True
        assert "meta" not in envelope
        assert envelope["error"]["details"]["urlContains"] == "nomatch"

    def test_multi_word_window_title(self, workdir, devtools):
        code, envelope = run(["connect", "--port", "9222", "--window-title", "My", "App"])
        assert code == 0
        assert envelope["data"]["session"]["targetTitle"] == "My App"

    def test_connect_refused(self, workdir, monkeypatch):
        def refuse(host, port, timeout=None):
            raise ConnectionRefusedError(111, "Connection refused")

        monkeypatch.setattr("harness_electron.adapters.cdp_discovery.http.client.HTTPConnection", refuse)
        code, envelope = run(["connect", "--port", "9333"])
        assert code == 20
        assert envelope["error"]["code"] == "CONNECT_FAILED"

    def test_sessions_list_and_prune(self, workdir, devtools):
        run(["connect", "--port", "9222"])
        run(["connect", "--port", "9222", "--session", "second"])

        code, envelope = run(["sessions", "list"])
        assert code == 0
        assert envelope["command"] == "sessions list"
        assert [s["id"] for s in envelope["data"]["sessions"]] == ["default", "second"]

        code, envelope = run(["sessions", "prune", "--session", "second"])
        assert envelope["data"] == {"removed": 1, "scope": "second"}
        assert envelope["session"] == "second"

        code, envelope = run(["sessions", "prune"])
        assert envelope["data"] == {"removed": 1, "scope": "all"}

    def test_disconnect(self, workdir, devtools):
        run(["connect", "--port", "9222"])
        code, envelope = run(["disconnect"])
        assert code == 0
        assert envelope["data"] == {"removed": True, "session": "default"}


# ── page commands through the CLI ────────────────────────────────────


class TestPageCommands:
    @pytest.fixture
    def opener(self, workdir, devtools):
        run(["connect", "--port", "9222"])
        page = FakePage().add("role=button[name=Save all]", FakeElement(tag="button", text="Save all"))
        return FakePageOpener(page)

    def test_missing_session(self, workdir):
        code, envelope = run(["dom", "--session", "ghost"])
        assert code == 10
        assert envelope["session"] == "ghost"
        assert envelope["error"]["code"] == "INVALID_INPUT"
        assert envelope["error"]["details"]["reason"] == "SESSION_NOT_FOUND"

    def test_query_then_click_by_element_id(self, opener):
        code, envelope = run(["query", "--role", "button", "--name", "Save", "all"], page_opener=opener)
        assert code == 0
        assert envelope["data"]["elements"][0]["elementId"] == "e1"

        code, envelope = run(["click", "--element-id", "e1"], page_opener=opener)
        assert code == 0
        assert envelope["data"]["target"] == {"strategy": "element-id", "index": 0, "elementId": "e1"}
        assert ("click", "role=button[name=Save all]", 0) in opener.page.calls

    def test_two_selector_strategies(self, opener):
        code, envelope = run(["click", "--css", "#a", "--text", "Save"], page_opener=opener)
        assert code == 30
        assert envelope["error"]["code"] == "INVALID_SELECTOR"
        assert opener.opened == []

    def test_query_requires_selector(self, opener):
        code, envelope = run(["query"], page_opener=opener)
        assert code == 30
        assert "exactly one" in envelope["error"]["message"]

    def test_strict_single_with_index(self, opener):
        code, envelope = run(
            ["click", "--css", "button", "--strict-single", "--index", "1"], page_opener=opener
        )
        assert code == 10
        assert envelope["error"]["code"] == "INVALID_INPUT"

    def test_visible_assertion_timeout(self, opener):
        opener.page.add("#modal", FakeElement(visible=False))
        code, envelope = run(
            ["assert", "--kind", "visible", "--css", "#modal", "--timeout", "50"], page_opener=opener
        )
        assert code == 40
        assert envelope["error"]["code"] == "TIMEOUT"
        assert envelope["error"]["retryable"] is True

    def test_url_assertion_failure(self, opener):
        code, envelope = run(["assert", "--kind", "url", "--expected", "settings"], page_opener=opener)
        assert code == 50
        assert envelope["error"]["code"] == "ASSERT_FAIL"
        assert opener.closed == 1


# ── argument errors ──────────────────────────────────────────────────


class TestArgumentErrors:
    @pytest.mark.parametrize(
        "argv, command",
        [
            (["connect"], "connect"),
            (["connect", "--port", "zero"], "connect"),
            (["click", "--index", "-1", "--css", "a"], "click"),
            (["dom", "--format", "xml"], "dom"),
            (["teleport"], "teleport"),
            ([], "unknown"),
            (["sessions"], "sessions"),
        ],
    )
    def test_usage_errors_are_invalid_input(self, workdir, argv, command):
        code, envelope = run(argv)
        assert code == 10
        assert envelope["ok"] is False
        assert envelope["command"] == command
        assert envelope["error"]["code"] == "INVALID_INPUT"

    def test_invalid_environment(self, workdir, monkeypatch):
        monkeypatch.setenv("HARNESS_ELECTRON_TIMEOUT_MS", "soon")
        code, envelope = run(["capabilities"])
        assert code == 10
        assert "HARNESS_ELECTRON_TIMEOUT_MS" in envelope["error"]["message"]

    def test_peek_command(self):
        assert _peek_command(["sessions", "prune", "--session=x"]) == ("sessions prune", "x")
        assert _peek_command(["--verbose", "click", "--session", "s1"]) == ("click", "s1")


# ── introspection ────────────────────────────────────────────────────


class TestIntrospection:
    def test_capabilities_without_session(self, workdir):
        code, envelope = run(["capabilities"])
        assert code == 0
        assert envelope["data"]["package"] == "harness-electron"

    def test_schema(self, workdir):
        code, envelope = run(["schema", "--verbose"])
        assert code == 0
        assert envelope["data"]["selectorRules"]["roleNameOnlyWithRole"] is True


# ── argv conventions ─────────────────────────────────────────────────


class TestArgvConventions:
    def test_dash_value_attached_with_equals(self, workdir, devtools):
        run(["connect", "--port", "9222"])
        opener = FakePageOpener(FakePage().add("#amount", FakeElement(tag="input")))
        code, envelope = run(["type", "--css", "#amount", "--value=-5"], page_opener=opener)
        assert code == 0
        assert ("fill", "#amount", 0, "-5") in opener.page.calls

    def test_dash_value_as_separate_word_is_invalid_input(self, workdir):
        code, envelope = run(["type", "--css", "#amount", "--value", "-x"])
        assert code == 10
        assert envelope["error"]["code"] == "INVALID_INPUT"

    def test_help_prints_usage_and_exits_zero(self, workdir, capsys):
        with pytest.raises(SystemExit) as info:
            main(["--help"])
        assert info.value.code == 0
        out = capsys.readouterr().out
        assert out.startswith("usage: harness-electron")
        assert "without an envelope" in " ".join(out.split())
