"""Tests for the output formatting system.

Covers:
- OutputFormat resolution (auto -> rich/plain based on TTY)
- NO_COLOR / TERM=dumb color disabling
- stdout vs stderr discipline, quiet and verbose modes
- format_response in JSON, plain, and Rich modes
- print_data newline handling
- print_table, print_fields, and print_block in all three modes
- Pager invocation and output file redirection
- Global instance management and convenience functions
"""

from __future__ import annotations

import json

import pytest

from apidex import output as output_module
from apidex.output import (
    OutputFormat,
    OutputManager,
    _is_tty,
    _plain_cell,
    _should_disable_color,
    get_output,
    reset_output,
    set_output,
)


ENDPOINT = {"method": "GET", "path": "/pets", "tag": "pets", "summary": "List all pets"}


# ------------------------------------------------------------------ #
# Fixtures
# ------------------------------------------------------------------ #


@pytest.fixture()
def non_tty(monkeypatch):
    """Patch stdout.isatty() to return False."""
    monkeypatch.setattr("apidex.output._is_tty", lambda: False)


@pytest.fixture()
def tty(monkeypatch):
    """Patch stdout.isatty() to return True."""
    monkeypatch.setattr("apidex.output._is_tty", lambda: True)


def _plain(**kwargs) -> OutputManager:
    return OutputManager(format=OutputFormat.PLAIN, no_color=True, **kwargs)


def _json(**kwargs) -> OutputManager:
    return OutputManager(format=OutputFormat.JSON, no_color=True, **kwargs)


# ------------------------------------------------------------------ #
# OutputFormat resolution
# ------------------------------------------------------------------ #


class TestOutputFormatResolution:
    def test_auto_resolves_to_plain_when_not_tty(self, non_tty):
        assert OutputManager(format=OutputFormat.AUTO).format == OutputFormat.PLAIN

    def test_auto_resolves_to_rich_when_tty(self, tty, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "xterm-256color")
        assert OutputManager(format=OutputFormat.AUTO).format == OutputFormat.RICH

    def test_auto_resolves_to_plain_when_tty_but_no_color(self, tty):
        assert OutputManager(format=OutputFormat.AUTO, no_color=True).format == OutputFormat.PLAIN

    def test_explicit_format_kept(self, non_tty):
        assert OutputManager(format=OutputFormat.RICH).format == OutputFormat.RICH
        assert OutputManager(format=OutputFormat.JSON).format == OutputFormat.JSON


class TestColorDisabling:
    def test_no_color_env_any_value(self, monkeypatch):
        monkeypatch.setenv("NO_COLOR", "")
        assert _should_disable_color() is True

    def test_term_dumb_disables_color(self, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "dumb")
        assert _should_disable_color() is True

    def test_normal_term_keeps_color(self, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "xterm")
        assert _should_disable_color() is False


# ------------------------------------------------------------------ #
# stdout vs stderr discipline
# ------------------------------------------------------------------ #


class TestStdoutStderrDiscipline:
    """Data goes to stdout, diagnostics go to stderr."""

    def test_print_data_goes_to_stdout(self, capfd, non_tty):
        _plain().print_data("GET\t/pets")
        captured = capfd.readouterr()
        assert captured.out == "GET\t/pets\n"
        assert captured.err == ""

    @pytest.mark.parametrize("method", ["info", "error", "warning", "success", "suggest"])
    def test_diagnostics_go_to_stderr(self, capfd, non_tty, method):
        getattr(_plain(), method)("Loaded 6 endpoints")
        captured = capfd.readouterr()
        assert captured.out == ""
        assert "Loaded 6 endpoints" in captured.err

    def test_debug_goes_to_stderr(self, capfd, non_tty):
        _plain(verbose=True).debug("Indexed 6 endpoints")
        captured = capfd.readouterr()
        assert captured.out == ""
        assert captured.err == "[debug] Indexed 6 endpoints\n"

    def test_no_diagnostics_leak_into_json(self, capfd, non_tty):
        mgr = _json()
        mgr.info("loading spec...")
        mgr.format_response(ENDPOINT)
        mgr.success("done")
        captured = capfd.readouterr()
        assert json.loads(captured.out) == ENDPOINT
        assert "loading spec..." in captured.err


class TestQuietAndVerbose:
    @pytest.mark.parametrize("method", ["info", "success", "suggest"])
    def test_quiet_suppresses(self, capfd, non_tty, method):
        getattr(_plain(quiet=True), method)("hidden")
        assert capfd.readouterr().err == ""

    @pytest.mark.parametrize("method", ["warning", "error"])
    def test_quiet_keeps_problems(self, capfd, non_tty, method):
        getattr(_plain(quiet=True), method)("shown")
        assert "shown" in capfd.readouterr().err

    def test_quiet_keeps_data(self, capfd, non_tty):
        _plain(quiet=True).print_data("data")
        assert capfd.readouterr().out == "data\n"

    def test_quiet_suppresses_progress(self, capfd, tty):
        _plain(quiet=True).progress("Loading...")
        assert capfd.readouterr().err == ""

    def test_debug_hidden_by_default(self, capfd, non_tty):
        _plain().debug("hidden")
        assert capfd.readouterr().err == ""

    def test_progress_only_on_tty(self, capfd, non_tty):
        _plain().progress("Loading...")
        assert capfd.readouterr().err == ""


class TestDiagnosticFormatting:
    def test_warning_prefix(self, capfd, non_tty):
        _plain().warning("duplicate endpoint skipped")
        assert capfd.readouterr().err == "Warning: duplicate endpoint skipped\n"

    def test_error_prefix(self, capfd, non_tty):
        _plain().error("spec not found")
        assert capfd.readouterr().err == "Error: spec not found\n"

    def test_suggest_has_arrow(self, capfd, non_tty):
        _plain().suggest("Try: apidex tags")
        assert capfd.readouterr().err == "→ Try: apidex tags\n"


# ------------------------------------------------------------------ #
# format_response
# ------------------------------------------------------------------ #


class TestJsonFormat:
    def test_dict_as_json(self, capfd, non_tty):
        _json().format_response({"endpoints": [ENDPOINT]})
        assert json.loads(capfd.readouterr().out) == {"endpoints": [ENDPOINT]}

    def test_string_that_is_json(self, capfd, non_tty):
        _json().format_response('{"count": 6}')
        assert json.loads(capfd.readouterr().out) == {"count": 6}

    def test_plain_string_passed_through(self, capfd, non_tty):
        _json().format_response("Endpoint not found: GET /nope")
        assert capfd.readouterr().out == "Endpoint not found: GET /nope\n"

    @pytest.mark.parametrize("value", [[], {}, 42, True, None])
    def test_scalars_and_empties(self, capfd, non_tty, value):
        _json().format_response(value)
        assert json.loads(capfd.readouterr().out) == value

    def test_indented_and_unicode_preserved(self, capfd, non_tty):
        _json().format_response({"summary": "Créer un animal"})
        out = capfd.readouterr().out
        assert "\n" in out
        assert "Créer un animal" in out


class TestPlainFormat:
    def test_dict_as_key_value(self, capfd, non_tty):
        _plain().format_response({"title": "Swagger Petstore", "version": "1.0.0"})
        assert capfd.readouterr().out == "title\tSwagger Petstore\nversion\t1.0.0\n"

    def test_nested_values_as_compact_json(self, capfd, non_tty):
        _plain().format_response({"tags": ["pets", "store"]})
        assert capfd.readouterr().out == 'tags\t["pets", "store"]\n'

    def test_list_of_dicts_as_rows(self, capfd, non_tty):
        _plain().format_response([ENDPOINT, {**ENDPOINT, "method": "POST"}])
        assert capfd.readouterr().out.splitlines() == [
            "GET\t/pets\tpets\tList all pets",
            "POST\t/pets\tpets\tList all pets",
        ]

    def test_list_of_primitives(self, capfd, non_tty):
        _plain().format_response(["pets", "store"])
        assert capfd.readouterr().out == "pets\nstore\n"

    def test_empty_string(self, capfd, non_tty):
        _plain().format_response("")
        assert capfd.readouterr().out == "\n"


class TestRichFormat:
    def test_dict_produces_output(self, capfd, non_tty):
        OutputManager(format=OutputFormat.RICH, no_color=True).format_response(ENDPOINT)
        out = capfd.readouterr().out
        assert "/pets" in out
        assert "List all pets" in out

    def test_plain_string(self, capfd, non_tty):
        OutputManager(format=OutputFormat.RICH, no_color=True).format_response("just [text]")
        assert "just [text]" in capfd.readouterr().out


class TestPlainCell:
    def test_string(self):
        assert _plain_cell("x") == "x"

    def test_container(self):
        assert _plain_cell({"a": 1}) == '{"a": 1}'


# ------------------------------------------------------------------ #
# print_data
# ------------------------------------------------------------------ #


class TestPrintData:
    def test_newline_appended_when_missing(self, capfd, non_tty):
        _plain().print_data("# Title")
        assert capfd.readouterr().out == "# Title\n"

    def test_existing_newline_not_doubled(self, capfd, non_tty):
        _plain().print_data("# Title\n\n> preamble\n")
        assert capfd.readouterr().out == "# Title\n\n> preamble\n"


# ------------------------------------------------------------------ #
# print_table / print_fields / print_block
# ------------------------------------------------------------------ #


class TestPrintTable:
    def test_json_mode(self, capfd, non_tty):
        _json().print_table(["Method", "Path"], [["GET", "/pets"], ["POST", "/pets"]])
        assert json.loads(capfd.readouterr().out) == [
            {"Method": "GET", "Path": "/pets"},
            {"Method": "POST", "Path": "/pets"},
        ]

    def test_json_mode_ignores_title(self, capfd, non_tty):
        _json().print_table(["Tag"], [], title="Tags (0)")
        assert json.loads(capfd.readouterr().out) == []

    def test_plain_mode(self, capfd, non_tty):
        _plain().print_table(["Method", "Path"], [["GET", "/pets"]])
        assert capfd.readouterr().out == "Method\tPath\nGET\t/pets\n"

    def test_plain_mode_title_line(self, capfd, non_tty):
        _plain().print_table(["Method", "Endpoint"], [["GET", "List all pets"]], title="pets (1)")
        assert capfd.readouterr().out.splitlines() == [
            "# pets (1)",
            "Method\tEndpoint",
            "GET\tList all pets",
        ]

    def test_rich_mode(self, capfd, non_tty):
        OutputManager(format=OutputFormat.RICH, no_color=True).print_table(
            ["Method", "Path"], [["GET", "/pets/{petId}"]], title="pets (1)"
        )
        out = capfd.readouterr().out
        assert "Method" in out
        assert "/pets/{petId}" in out
        assert "pets (1)" in out

    def test_rich_mode_cells_not_markup(self, capfd, non_tty):
        OutputManager(format=OutputFormat.RICH, no_color=True).print_table(
            ["Type"], [["Array[bold]"]]
        )
        assert "Array[bold]" in capfd.readouterr().out


class TestPrintFields:
    FIELDS = [("Method", "GET"), ("Path", "/pets"), ("Description", ""), ("Tags", "pets")]

    def test_plain_mode(self, capfd, non_tty):
        _plain().print_fields(self.FIELDS, title="GET /pets")
        assert capfd.readouterr().out.splitlines() == [
            "GET /pets",
            "Method\tGET",
            "Path\t/pets",
            "Tags\tpets",
        ]

    def test_json_mode_skips_empty(self, capfd, non_tty):
        _json().print_fields(self.FIELDS)
        assert json.loads(capfd.readouterr().out) == {
            "Method": "GET",
            "Path": "/pets",
            "Tags": "pets",
        }

    def test_rich_mode(self, capfd, non_tty):
        OutputManager(format=OutputFormat.RICH, no_color=True).print_fields(
            self.FIELDS, title="GET /pets"
        )
        out = capfd.readouterr().out
        assert "GET /pets" in out
        assert "Description" not in out


class TestPrintBlock:
    SCHEMA = "{\n    id: integer\n    name: string\n  }"

    def test_plain_mode(self, capfd, non_tty):
        _plain().print_block(self.SCHEMA, title="Pet")
        assert capfd.readouterr().out == "Pet:\n" + self.SCHEMA + "\n"

    def test_plain_mode_without_title(self, capfd, non_tty):
        _plain().print_block("string")
        assert capfd.readouterr().out == "string\n"

    def test_json_mode(self, capfd, non_tty):
        _json().print_block(self.SCHEMA, title="Pet")
        assert json.loads(capfd.readouterr().out) == {"title": "Pet", "text": self.SCHEMA}

    def test_rich_mode_preserves_indentation(self, capfd, non_tty):
        OutputManager(format=OutputFormat.RICH, no_color=True).print_block(self.SCHEMA, title="Pet")
        out = capfd.readouterr().out
        assert "Pet" in out
        assert "    id: integer" in out


# ------------------------------------------------------------------ #
# Output file redirection
# ------------------------------------------------------------------ #


class TestOutputFile:
    def test_format_response_writes_to_file(self, tmp_path, capfd, non_tty):
        outfile = tmp_path / "out.json"
        _json(output_file=str(outfile)).format_response(ENDPOINT)
        assert capfd.readouterr().out == ""
        assert json.loads(outfile.read_text(encoding="utf-8")) == ENDPOINT
        assert outfile.read_text(encoding="utf-8").endswith("\n")

    def test_print_data_appends_to_file(self, tmp_path, capfd, non_tty):
        outfile = tmp_path / "out.txt"
        mgr = _plain(output_file=str(outfile))
        mgr.print_data("GET\t/pets")
        mgr.print_data("POST\t/pets\n")
        assert capfd.readouterr().out == ""
        assert outfile.read_text(encoding="utf-8") == "GET\t/pets\nPOST\t/pets\n"

    def test_new_manager_truncates_existing_file(self, tmp_path, non_tty):
        outfile = tmp_path / "out.txt"
        outfile.write_text("stale contents\n", encoding="utf-8")
        _plain(output_file=str(outfile)).print_data("GET\t/pets")
        _plain(output_file=str(outfile)).print_data("GET\t/pets")
        assert outfile.read_text(encoding="utf-8") == "GET\t/pets\n"

    def test_table_rows_accumulate_within_one_manager(self, tmp_path, non_tty):
        outfile = tmp_path / "out.txt"
        outfile.write_text("stale contents\n", encoding="utf-8")
        _plain(output_file=str(outfile)).print_table(["Method", "Path"], [["GET", "/pets"]], title="pets")
        assert outfile.read_text(encoding="utf-8") == "# pets\nMethod\tPath\nGET\t/pets\n"


# ------------------------------------------------------------------ #
# Pager support
# ------------------------------------------------------------------ #


class TestPager:
    def test_pager_disabled_falls_through_to_stdout(self, capfd, tty):
        _plain(use_pager=False).paged_output("# Export\n")
        assert capfd.readouterr().out == "# Export\n"

    def test_pager_skipped_when_not_tty(self, capfd, non_tty):
        _plain().paged_output("# Export\n")
        assert capfd.readouterr().out == "# Export\n"

    def test_pager_skipped_with_output_file(self, tmp_path, tty):
        outfile = tmp_path / "export.md"
        _plain(output_file=str(outfile)).paged_output("# Export\n")
        assert outfile.read_text(encoding="utf-8") == "# Export\n"

    def test_pager_invoked_when_tty(self, tty, monkeypatch):
        invoked_with: list[str] = []
        fed: list[str] = []

        class FakeProc:
            def __init__(self, cmd, **kwargs):
                invoked_with.append(cmd)

            def communicate(self, input=None):
                fed.append(input)

        monkeypatch.setattr("subprocess.Popen", FakeProc)
        monkeypatch.delenv("PAGER", raising=False)
        OutputManager(format=OutputFormat.RICH, no_color=True).paged_output("# Export\n")
        assert invoked_with == ["less -FIRX"]
        assert fed == ["# Export\n"]

    def test_pager_respects_pager_env(self, tty, monkeypatch):
        invoked_with: list[str] = []

        class FakeProc:
            def __init__(self, cmd, **kwargs):
                invoked_with.append(cmd)

            def communicate(self, input=None):
                pass

        monkeypatch.setattr("subprocess.Popen", FakeProc)
        monkeypatch.setenv("PAGER", "more")
        OutputManager(format=OutputFormat.RICH, no_color=True).paged_output("content")
        assert invoked_with == ["more"]

    def test_pager_fallback_on_oserror(self, capfd, tty, monkeypatch):
        def broken_popen(*args, **kwargs):
            raise OSError("no such pager")

        monkeypatch.setattr("subprocess.Popen", broken_popen)
        OutputManager(format=OutputFormat.RICH, no_color=True).paged_output("fallback text")
        assert "fallback text" in capfd.readouterr().out


# ------------------------------------------------------------------ #
# Global instance and convenience functions
# ------------------------------------------------------------------ #


class TestGlobalInstance:
    def test_get_output_creates_default(self):
        reset_output()
        assert isinstance(get_output(), OutputManager)

    def test_set_output_overrides(self):
        custom = _json()
        set_output(custom)
        assert get_output() is custom

    def test_reset_output_clears(self):
        first = _json()
        set_output(first)
        reset_output()
        assert get_output() is not first


class TestConvenienceFunctions:
    def test_format_response(self, capfd, non_tty):
        set_output(_json())
        output_module.format_response({"a": 1})
        assert json.loads(capfd.readouterr().out) == {"a": 1}

    def test_print_table(self, capfd, non_tty):
        set_output(_json())
        output_module.print_table(["Tag"], [["pets"]])
        assert json.loads(capfd.readouterr().out) == [{"Tag": "pets"}]

    def test_print_fields(self, capfd, non_tty):
        set_output(_plain())
        output_module.print_fields([("Path", "/pets")])
        assert capfd.readouterr().out == "Path\t/pets\n"

    def test_print_block(self, capfd, non_tty):
        set_output(_plain())
        output_module.print_block("integer", title="Id")
        assert capfd.readouterr().out == "Id:\ninteger\n"

    @pytest.mark.parametrize("name", ["info", "error", "success", "warning", "suggest"])
    def test_diagnostics(self, capfd, non_tty, name):
        set_output(_plain())
        getattr(output_module, name)("message text")
        assert "message text" in capfd.readouterr().err

    def test_debug(self, capfd, non_tty):
        set_output(_plain(verbose=True))
        output_module.debug("trace")
        assert "trace" in capfd.readouterr().err

    def test_progress(self, capfd, tty):
        set_output(_plain())
        output_module.progress("working...")
        assert "working..." in capfd.readouterr().err

    def test_paged_output(self, capfd, non_tty):
        set_output(_plain(use_pager=False))
        output_module.paged_output("page me")
        assert capfd.readouterr().out == "page me\n"


class TestIsTty:
    def test_false_under_pytest(self):
        assert _is_tty() is False


class TestOutputFormatEnum:
    def test_enum_is_str(self):
        assert OutputFormat("json") == OutputFormat.JSON == "json"
