"""Module defining custom exceptions for the Brew Update Tracker."""

from __future__ import annotations

from typing import Any

# Exit Codes
EXIT_SUCCESS = 0
EXIT_USER_ERROR = 1
EXIT_SYSTEM_ERROR = 2


class BrewError(Exception):
    """Base exception class with context propagation.

    All exceptions in brewtrack should inherit from this class.
    Context is a dictionary of details that the CLI and the run log
    render after the message.

    Example:
        raise BrewError("An error occurred", context={"package": "foo"})
    """
    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        self.message = message
        self.context = context or {}
        super().__init__(message)

    def __str__(self) -> str:
        """String representation of the exception including context."""
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} [{context_str}]"
        return self.message


class TransientError(BrewError):
    """Errors in an individual external call.

    These errors are typically due to temporary conditions such as
    network issues, a failing tap, or malformed command output. The
    tracker treats them as non-fatal: the step that raised them is
    recorded in the run log and replaced by an empty or default value.
    """
    pass


class UserError(BrewError):
    """Errors caused by the user's environment or inputs.

    These errors should not be retried without correction, and the
    CLI should display helpful messages to guide the user.
    """
    pass


## Specific Exceptions ##

class BrewCommandError(TransientError):
    """Brew command returned a non-zero exit code or unusable output.

    Typically indicates:
        - Network issues
        - A broken or removed tap
        - Corrupted local Brew installation
    """
    def __init__(
        self,
        message: str | None = None,
        command: str | None = None,
        returncode: int | None = None,
        error: str | None = None,
        context: dict[str, Any] | None = None
    ) -> None:
        """Initialise BrewCommandError with detailed context.

        Args:
            message: Optional custom error message.
            command: The brew command that was executed.
            returncode: The exit code returned by the command.
            error: The error output from the command.
            context: Additional context information.
        """
        ctx = context or {}
        if command:
            ctx["command"] = command
        if returncode is not None:
            ctx["returncode"] = returncode
        if error:
            ctx["error"] = error

        if message is None:
            message = f"Brew command failed with exit code {returncode if returncode is not None else 'unknown'}"

        super().__init__(message, context=ctx)


class BrewTimeoutError(TransientError):
    """Brew command timed out.

    Typically indicates:
        - Slow network conditions
        - Brew server overload
        - System resource constraints
    """
    def __init__(
        self,
        message: str | None = None,
        command: str | None = None,
        timeout: int | None = None,
        context: dict[str, Any] | None = None
    ) -> None:
        """Initialise BrewTimeoutError with detailed context.

        Args:
            message: Optional custom error message.
            command: The brew command that was executed.
            timeout: The timeout threshold in seconds.
            context: Additional context information.
        """
        ctx = context or {}
        if command:
            ctx["command"] = command
        if timeout is not None:
            ctx["timeout"] = timeout

        if message is None:
            message = f"Brew command timed out after {timeout or 'unknown'}s"

        super().__init__(message, context=ctx)


class MissingToolError(UserError):
    """A required executable is not installed.

    This is a fatal precondition: the run stops before any other work.
    """
    def __init__(
        self,
        message: str | None = None,
        tool: str | None = None,
        hint: str | None = None,
        context: dict[str, Any] | None = None
    ) -> None:
        """Initialise MissingToolError with detailed context.

        Args:
            message: Optional custom error message.
            tool: The name of the missing executable.
            hint: How to install the missing executable.
            context: Additional context information.
        """
        ctx = context or {}
        if tool:
            ctx["tool"] = tool
        ctx["hint"] = hint or "Install it and make sure it is on your PATH"

        if message is None:
            message = f"{tool or 'A required tool'} is not installed"

        super().__init__(message, context=ctx)


# CLI Error Message Templates

ERROR_TEMPLATES = {
    MissingToolError: (
        "❌ Error: {message}\n"
        "   {hint}"
    ),
    BrewError: (
        "❌ {message}"
    ),
}


def format_error_message(error: BrewError) -> str:
    """Formats an error message for CLI display based on the error type.

    Args:
        error: The BrewError instance to format.

    Returns:
        A formatted string message for CLI display.
    """
    template = ERROR_TEMPLATES.get(type(error), ERROR_TEMPLATES[BrewError])
    context = {k: v for k, v in getattr(error, "context", {}).items() if k != "message"}
    try:
        return template.format(message=error.message, **context)
    except KeyError:
        return f"❌ {error.message}"
