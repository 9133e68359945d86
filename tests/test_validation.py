# Tests for validation utilities
import sys

import pytest

from mcpstudio.models import ServerEntry
from mcpstudio.utils.validation import ValidationError, validate_command_exists, validate_server


class TestValidateCommandExists:
    """Tests for validate_command_exists function."""

    def test_valid_command_returns_none(self):
        """Test that existing command returns None."""
        # The running interpreter is always resolvable
        result = validate_command_exists(sys.executable)
        assert result is None

    def test_invalid_command_returns_warning(self):
        """Test that non-existent command returns a warning."""
        result = validate_command_exists("definitely_not_a_real_command_xyz123")
        assert result is not None
        assert result.severity == "warning"
        assert "not found" in result.message.lower()
        assert "definitely_not_a_real_command_xyz123" in result.message

    def test_error_has_empty_server_name(self):
        """Test that command validation result has empty server_name."""
        result = validate_command_exists("nonexistent_cmd")
        assert result is not None
        assert result.server_name == ""


class TestValidateServer:
    """Tests for validate_server function."""

    def test_valid_server_passes(self):
        """Test that server with valid command passes validation."""
        entry = ServerEntry(name="test-server", command=sys.executable, args=["-m", "module"])
        assert validate_server(entry) == []

    def test_missing_command_on_path_only_warns(self):
        """Clients may have their own PATH, so this does not block."""
        entry = ServerEntry(name="remote-server", command="nonexistent_command_xyz")
        errors = validate_server(entry)
        assert len(errors) == 1
        assert errors[0].severity == "warning"
        assert errors[0].server_name == "remote-server"

    def test_empty_command_is_error(self):
        entry = ServerEntry(name="broken", command="  ")
        errors = validate_server(entry)
        assert [e.severity for e in errors] == ["error"]
        assert "command" in errors[0].message

    @pytest.mark.parametrize("name", ["", "has space", "-leading-dash", "semi;colon"])
    def test_invalid_names(self, name):
        entry = ServerEntry(name=name, command=sys.executable)
        errors = validate_server(entry)
        assert any(e.severity == "error" and "name" in e.message for e in errors)

    @pytest.mark.parametrize("name", ["fs", "github.v2", "org@tool", "my_server-1"])
    def test_valid_names(self, name):
        assert validate_server(ServerEntry(name=name, command=sys.executable)) == []

    def test_empty_env_key_is_error(self):
        entry = ServerEntry(name="fs", command=sys.executable, env={"": "value"})
        errors = validate_server(entry)
        assert len(errors) == 1
        assert errors[0].severity == "error"


class TestValidationError:
    """Tests for ValidationError dataclass."""

    def test_is_frozen(self):
        error = ValidationError(server_name="fs", message="bad", severity="error")
        with pytest.raises(AttributeError):
            error.message = "changed"
