# Path expansion utilities
import os
import re
from pathlib import Path

# ABOUTME: Pattern matches ${VAR_NAME} where VAR_NAME is uppercase with underscores
ENV_VAR_PATTERN = re.compile(r'\$\{([A-Z_][A-Z0-9_]*)\}')

# ABOUTME: Windows-style %VAR% references used in client default paths
WINDOWS_VAR_PATTERN = re.compile(r'%([A-Za-z_][A-Za-z0-9_]*)%')


def _appdata() -> str:
    return os.environ.get("APPDATA") or str(Path.home() / "AppData" / "Roaming")


def expand_path(value: str) -> Path:
    """Expand ~, %VAR% and ${VAR} references in a path.

    ABOUTME: %APPDATA% falls back to ~/AppData/Roaming when unset
    ABOUTME: Unknown variables are left untouched

    Examples:
        >>> expand_path("~/.codex/config.toml")
        PosixPath('/Users/user/.codex/config.toml')
        >>> expand_path("%APPDATA%/Claude/config.json")
        PosixPath('/Users/user/AppData/Roaming/Claude/config.json')
    """
    def replace_windows(match: re.Match[str]) -> str:
        var_name = match.group(1)
        if var_name.upper() == "APPDATA":
            return _appdata()
        return os.environ.get(var_name, match.group(0))

    def replace_env(match: re.Match[str]) -> str:
        return os.environ.get(match.group(1), match.group(0))

    expanded = WINDOWS_VAR_PATTERN.sub(replace_windows, value)
    expanded = ENV_VAR_PATTERN.sub(replace_env, expanded)
    return Path(expanded).expanduser()
