# ABOUTME: Tests for path expansion used by client detection
# ABOUTME: Covers ~, %VAR% and ${VAR} forms
from pathlib import Path

from mcpstudio.utils.paths import expand_path


class TestExpandPath:
    """Tests for expand_path function."""

    def test_expands_home(self, tmp_path, monkeypatch):
        monkeypatch.setenv("HOME", str(tmp_path))
        assert expand_path("~/.codex/config.toml") == tmp_path / ".codex" / "config.toml"

    def test_appdata_from_environment(self, monkeypatch):
        monkeypatch.setenv("APPDATA", "/roaming")
        assert expand_path("%APPDATA%/Claude/config.json") == Path("/roaming/Claude/config.json")

    def test_appdata_fallback(self, tmp_path, monkeypatch):
        monkeypatch.delenv("APPDATA", raising=False)
        monkeypatch.setenv("HOME", str(tmp_path))
        assert expand_path("%APPDATA%/Claude") == tmp_path / "AppData" / "Roaming" / "Claude"

    def test_windows_style_variable(self, monkeypatch):
        monkeypatch.setenv("LIBRECHAT_HOME", "/srv/librechat")
        assert expand_path("%LIBRECHAT_HOME%/librechat.yaml") == Path("/srv/librechat/librechat.yaml")

    def test_braced_variable(self, monkeypatch):
        monkeypatch.setenv("MCP_ROOT", "/opt/mcp")
        assert expand_path("${MCP_ROOT}/config.json") == Path("/opt/mcp/config.json")

    def test_unknown_variables_untouched(self, monkeypatch):
        monkeypatch.delenv("MCPSTUDIO_UNSET", raising=False)
        assert expand_path("/x/${MCPSTUDIO_UNSET}/%MCPSTUDIO_UNSET%") == Path(
            "/x/${MCPSTUDIO_UNSET}/%MCPSTUDIO_UNSET%"
        )

    def test_plain_path(self):
        assert expand_path("/etc/config.json") == Path("/etc/config.json")
