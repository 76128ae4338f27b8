"""Error types and formatting utilities for consistent error messages.

Error Style Guide:
- User-facing errors use 'Error: ' prefix
- Use present tense: 'must be', 'is required'
- Include actionable hints where helpful
"""


class PreconditionError(Exception):
    """Raised when the host cannot run the requested operation at all.

    Checked before any step runs; the command reports it and exits non-zero.
    """

    pass


def format_error(message: str) -> str:
    """Format an error message with consistent prefix.

    Examples:
        >>> format_error("log file not writable")
        'Error: log file not writable'
    """
    return f"Error: {message}"


def format_suggestion(message: str, suggestion: str) -> str:
    """Format an error message with a helpful suggestion.

    Examples:
        >>> format_suggestion("This installer is only supported on Windows", "use --dry-run to simulate")
        'Error: This installer is only supported on Windows. Hint: use --dry-run to simulate'
    """
    return f"{format_error(message)}. Hint: {suggestion}"


__all__ = [
    "PreconditionError",
    "format_error",
    "format_suggestion",
]
