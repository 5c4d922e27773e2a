"""Fake secret store for testing."""

from jira_dash.gateway.secret_store.abc import SecretStore, SecretStoreError


class FakeSecretStore(SecretStore):
    """In-memory secret store.

    This class has NO public setup methods. All state is provided via
    constructor using keyword arguments.
    """

    def __init__(
        self,
        *,
        secrets: dict[str, str] | None = None,
        unavailable: bool = False,
    ) -> None:
        """Create FakeSecretStore with pre-configured state.

        Args:
            secrets: Initial profile -> secret mapping
            unavailable: If True, every operation raises SecretStoreError
                (simulates a locked or missing keychain)
        """
        self._secrets = dict(secrets) if secrets is not None else {}
        self._unavailable = unavailable
        self._retrieve_calls: list[str] = []

    def store(self, profile_id: str, secret: str) -> None:
        self._check_available()
        self._secrets[profile_id] = secret

    def retrieve(self, profile_id: str) -> str:
        self._retrieve_calls.append(profile_id)
        self._check_available()
        if profile_id not in self._secrets:
            raise SecretStoreError(f"No API token stored for profile '{profile_id}'.")
        return self._secrets[profile_id]

    def delete(self, profile_id: str) -> None:
        self._check_available()
        self._secrets.pop(profile_id, None)

    def exists(self, profile_id: str) -> bool:
        if self._unavailable:
            return False
        return profile_id in self._secrets

    def _check_available(self) -> None:
        if self._unavailable:
            raise SecretStoreError("Secret store unavailable")

    @property
    def secrets(self) -> dict[str, str]:
        """Current stored secrets. This property is for test assertions only."""
        return dict(self._secrets)

    @property
    def retrieve_calls(self) -> list[str]:
        """Profile IDs passed to retrieve(), in call order."""
        return self._retrieve_calls
