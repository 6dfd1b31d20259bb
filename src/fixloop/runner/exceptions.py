"""Exceptions for subprocess execution."""


class RunnerError(Exception):
    """Base exception for command runner operations."""


class CommandError(RunnerError):
    """Raised when a command exits with a non-zero code."""

    def __init__(self, command: str, exit_code: int | None, output: str) -> None:
        self.command = command
        self.exit_code = exit_code
        self.output = output
        super().__init__(f"Command failed with code {exit_code}\n{output}")
