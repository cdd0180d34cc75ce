"""Tests for the schema-diagram CLI.

Tests cover:
- Format detection and parsing commands
- Layout input output
- Sample listing
- Edit commands, printed and in place
- Settings files
"""

import json

import pytest
from click.testing import CliRunner

from schema_diagram import __version__
from schema_diagram.cli.main import cli
from schema_diagram.samples import get_sample

IDL_TEXT = """\
protocol Accounts {
  // roles
  enum Role {
    ADMIN, MEMBER
  }

  record User {
    long id;
    string name;
    Role role;
  }
}
"""


@pytest.fixture
def runner():
    """Create CLI test runner."""
    return CliRunner()


@pytest.fixture
def idl_file(tmp_path):
    """Write a small IDL protocol."""
    path = tmp_path / "accounts.avdl"
    path.write_text(IDL_TEXT)
    return path


@pytest.fixture
def json_file(tmp_path):
    """Write the user-address sample as a JSON schema file."""
    path = tmp_path / "user.avsc"
    path.write_text(get_sample("user-address").content)
    return path


# =============================================================================
# Inspection Commands
# =============================================================================

class TestInspection:
    """Tests for detect, parse and layout-input."""

    def test_version(self, runner):
        """Test --version."""
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_detect(self, runner, idl_file, json_file):
        """Test detected formats are printed."""
        assert runner.invoke(cli, ["detect", str(idl_file)]).stdout.strip() == "avro-idl"
        assert runner.invoke(cli, ["detect", str(json_file)]).stdout.strip() == "avro-json"

    def test_detect_unknown(self, runner, tmp_path):
        """Test unknown content exits non-zero."""
        path = tmp_path / "notes.txt"
        path.write_text("just notes")
        result = runner.invoke(cli, ["detect", str(path)])
        assert result.exit_code == 1
        assert "unknown" in result.stdout

    def test_parse_table(self, runner, idl_file):
        """Test the human-readable summary."""
        result = runner.invoke(cli, ["parse", str(idl_file)])
        assert result.exit_code == 0
        assert "Schema Graph" in result.output
        assert "avro-idl" in result.output

    def test_parse_json(self, runner, json_file):
        """Test the graph as JSON."""
        result = runner.invoke(cli, ["parse", str(json_file), "--json"])
        assert result.exit_code == 0

        data = json.loads(result.stdout)
        assert data["format"] == "avro-json"
        assert [e["id"] for e in data["graph"]["entities"]] == [
            "com.example.User", "com.example.Address", "com.example.UserStatus",
        ]

    def test_parse_errors_exit_non_zero(self, runner, tmp_path):
        """Test a graph with errors exits 1."""
        path = tmp_path / "notes.txt"
        path.write_text("just notes")
        result = runner.invoke(cli, ["parse", str(path), "--json"])
        assert result.exit_code == 1
        assert json.loads(result.stdout)["graph"]["diagnostics"][0]["severity"] == "error"

    def test_missing_file(self, runner, tmp_path):
        """Test a missing file is a usage error."""
        result = runner.invoke(cli, ["parse", str(tmp_path / "missing.avsc")])
        assert result.exit_code == 2

    def test_layout_input(self, runner, json_file):
        """Test the engine JSON and collapsed nodes."""
        result = runner.invoke(cli, ["layout-input", str(json_file), "--collapse", "com.example.User"])
        assert result.exit_code == 0

        data = json.loads(result.stdout)
        user = next(c for c in data["children"] if c["id"] == "com.example.User")
        assert user["height"] == 36
        assert len(user["ports"]) == 2
        assert data["layoutOptions"]["elk.algorithm"] == "layered"


# =============================================================================
# Samples
# =============================================================================

class TestSamples:
    """Tests for the samples command."""

    def test_list(self, runner):
        """Test all samples are listed."""
        result = runner.invoke(cli, ["samples"])
        assert result.exit_code == 0
        for name in ("user-address", "ecommerce", "user-service", "clinical"):
            assert name in result.output

    def test_print_sample(self, runner):
        """Test a sample is printed verbatim."""
        result = runner.invoke(cli, ["samples", "user-service"])
        assert result.exit_code == 0
        assert result.stdout == get_sample("user-service").content

    def test_unknown_sample(self, runner):
        """Test an unknown sample exits 1."""
        result = runner.invoke(cli, ["samples", "nope"])
        assert result.exit_code == 1
        assert "Unknown sample" in result.output


# =============================================================================
# Edit Commands
# =============================================================================

class TestEdit:
    """Tests for the edit command group."""

    def test_rename_field_prints(self, runner, idl_file):
        """Test the edited text goes to stdout and the file is untouched."""
        result = runner.invoke(cli, ["edit", "rename-field", str(idl_file), "User", "name", "full_name"])
        assert result.exit_code == 0
        assert result.stdout == IDL_TEXT.replace("string name;", "string full_name;")
        assert idl_file.read_text() == IDL_TEXT

    def test_in_place(self, runner, idl_file):
        """Test --in-place rewrites the file."""
        result = runner.invoke(cli, ["edit", "remove-field", str(idl_file), "User", "role", "-i"])
        assert result.exit_code == 0
        assert idl_file.read_text() == IDL_TEXT.replace("    Role role;\n", "")

    def test_miss_exits_non_zero(self, runner, idl_file):
        """Test an edit that changes nothing."""
        result = runner.invoke(cli, ["edit", "remove-field", str(idl_file), "User", "ghost"])
        assert result.exit_code == 1
        assert "Nothing changed" in result.output

    def test_add_field_generated_name(self, runner, idl_file):
        """Test a field name is generated when omitted."""
        result = runner.invoke(cli, ["edit", "add-field", str(idl_file), "User", "-t", "int"])
        assert result.exit_code == 0
        assert "    Role role;\n    int new_field;\n  }" in result.stdout

    def test_add_field_default_type(self, runner, idl_file):
        """Test the configured default type."""
        result = runner.invoke(cli, ["edit", "add-field", str(idl_file), "User", "bio"])
        assert "    string bio;\n" in result.stdout

    def test_set_type(self, runner, idl_file):
        """Test changing a field type."""
        result = runner.invoke(cli, ["edit", "set-type", str(idl_file), "User", "id", "string"])
        assert "    string id;\n" in result.stdout

    def test_set_default(self, runner, idl_file):
        """Test values are read as JSON."""
        result = runner.invoke(cli, ["edit", "set-default", str(idl_file), "User", "id", "42"])
        assert result.exit_code == 0
        assert "    long id = 42;\n" in result.stdout

    def test_set_default_plain_string(self, runner, idl_file):
        """Test a value that is not JSON is a string."""
        result = runner.invoke(cli, ["edit", "set-default", str(idl_file), "User", "name", "anon"])
        assert '    string name = "anon";\n' in result.stdout

    def test_set_default_requires_value(self, runner, idl_file):
        """Test VALUE or --remove is required."""
        result = runner.invoke(cli, ["edit", "set-default", str(idl_file), "User", "id"])
        assert result.exit_code == 2

    def test_add_symbol_generated_name(self, runner, idl_file):
        """Test a symbol name is generated when omitted."""
        result = runner.invoke(cli, ["edit", "add-symbol", str(idl_file), "Role"])
        assert "    ADMIN, MEMBER, NEW_SYMBOL\n" in result.stdout

    def test_rename_symbol(self, runner, idl_file):
        """Test renaming a symbol."""
        result = runner.invoke(cli, ["edit", "rename-symbol", str(idl_file), "Role", "MEMBER", "USER"])
        assert "    ADMIN, USER\n" in result.stdout

    def test_json_edit(self, runner, json_file):
        """Test JSON files are re-serialized."""
        result = runner.invoke(cli, ["edit", "add-symbol", str(json_file), "UserStatus", "DELETED"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["fields"][4]["type"]["symbols"][-1] == "DELETED"

    def test_settings_file(self, runner, json_file, tmp_path):
        """Test -c applies editor settings."""
        config = tmp_path / "settings.yaml"
        config.write_text("editor:\n  json_indent: 4\n")

        result = runner.invoke(cli, [
            "-c", str(config), "edit", "rename-field", str(json_file), "User", "name", "full_name",
        ])
        assert result.exit_code == 0
        assert result.stdout.startswith('{\n    "type": "record"')
