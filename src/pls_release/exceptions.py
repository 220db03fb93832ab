"""Exception hierarchy for pls-release.

Every error carries a stable machine-readable ``code`` and a ``context``
dict so calling tooling can branch on the cause without parsing messages.

Hierarchy:
    PlsError
    ├── ConfigError
    │   └── ConfigValidationError
    ├── ManifestError
    ├── NotFoundError
    ├── VersionError
    ├── GitError
    └── HostError
        └── HostConflictError
"""

from __future__ import annotations

from typing import Any


class PlsError(Exception):
    """Base class for all pls-release errors."""

    code = "PLS_ERROR"

    def __init__(self, message: str, *, code: str | None = None, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        self.context: dict[str, Any] = context

    def to_dict(self) -> dict[str, Any]:
        """Structured representation for JSON output."""
        return {"code": self.code, "message": self.message, "context": self.context}


class ConfigError(PlsError):
    """Configuration could not be read. Fatal, never retried."""

    code = "CONFIG_ERROR"


class ConfigValidationError(ConfigError):
    """Configuration was read but failed validation."""

    code = "CONFIG_VALIDATION_ERROR"


class ManifestError(PlsError):
    """The versions manifest is missing or malformed."""

    code = "INVALID_VERSIONS_MANIFEST"


class NotFoundError(PlsError):
    """A required branch, version or object does not exist."""

    code = "NOT_FOUND"


class VersionError(PlsError):
    """A version string is invalid or a transition is not allowed."""

    code = "INVALID_VERSION"


class GitError(PlsError):
    """A git command failed."""

    code = "GIT_ERROR"

    def __init__(self, message: str, *, stderr: str | None = None, **context: Any) -> None:
        super().__init__(message, stderr=stderr, **context)
        self.stderr = stderr


class HostError(PlsError):
    """The code host rejected a request or could not be reached."""

    code = "HOST_API_ERROR"

    def __init__(self, message: str, *, status: int | None = None, **context: Any) -> None:
        super().__init__(message, status=status, **context)
        self.status = status


class HostConflictError(HostError):
    """The object being created already exists on the host.

    Workflows treat this as success: another run got there first.
    """

    code = "ALREADY_EXISTS"
