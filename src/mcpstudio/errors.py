# Exceptions raised by mcpstudio


class ConfigParseError(ValueError):
    """Client config text could not be parsed into a document.

    ABOUTME: The sync orchestrator recovers by substituting a default document
    """


class ConfigValidationError(ValueError):
    """Merged output was rejected by the adapter that produced it.

    ABOUTME: Aborts a sync before anything is written to the client file
    """
