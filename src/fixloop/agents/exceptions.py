"""Exceptions for agent operations."""


class AgentError(Exception):
    """Base exception for all agent operations."""


class AnalysisError(AgentError):
    """Raised when the analysis stage cannot produce a response."""


class FixApplicationError(AgentError):
    """Base exception for applying a fix to a file."""


class PathTraversalError(FixApplicationError):
    """Raised when a fix targets a path outside the working tree."""
