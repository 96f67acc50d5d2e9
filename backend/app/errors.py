"""Exception hierarchy for invitation redemption and repository provisioning.

- ClassroomError: base for everything raised by the service layer
- SourceControlError: a GitHub API call failed or was unreachable
- ProvisioningError: a group's team/repository could not be provisioned
- TransientReconciliationError: a repository existence check failed for a
  reason other than confirmed absence
"""
from typing import Optional


class ClassroomError(Exception):
    """Base exception carrying a message and optional context."""

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} - Details: {self.details}"
        return self.message


class SourceControlError(ClassroomError):
    """Error returned by (or while reaching) the source-control API."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response_body: Optional[str] = None,
        details: Optional[dict] = None,
    ):
        self.status_code = status_code
        self.response_body = response_body
        super().__init__(message, details)


class ProvisioningError(ClassroomError):
    """Remote team/repository creation failed or no free repository name was found."""


class TransientReconciliationError(ClassroomError):
    """Could not tell whether a provisioned repository still exists."""
