"""Abstract secret store for per-profile API tokens."""

from abc import ABC, abstractmethod

SERVICE_NAME = "jira-dash"


class SecretStoreError(Exception):
    """Raised when the platform secret store cannot be used."""


class SecretStore(ABC):
    """Abstract interface for storing API tokens keyed by profile name.

    All implementations (real and fake) must implement this interface.
    """

    @abstractmethod
    def store(self, profile_id: str, secret: str) -> None:
        """Save or replace the secret for a profile.

        Raises:
            SecretStoreError: If the store rejects the write
        """
        ...

    @abstractmethod
    def retrieve(self, profile_id: str) -> str:
        """Return the secret for a profile.

        Raises:
            SecretStoreError: If no secret exists or the store is unavailable
        """
        ...

    @abstractmethod
    def delete(self, profile_id: str) -> None:
        """Remove the secret for a profile. Missing secrets are not an error.

        Raises:
            SecretStoreError: If the store is unavailable
        """
        ...

    @abstractmethod
    def exists(self, profile_id: str) -> bool:
        """Whether a secret is stored for the profile."""
        ...
