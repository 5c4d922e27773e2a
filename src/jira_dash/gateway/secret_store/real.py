"""Production secret store backed by the platform keyring."""

import keyring
from keyring.errors import KeyringError, PasswordDeleteError

from jira_dash.gateway.secret_store.abc import SERVICE_NAME, SecretStore, SecretStoreError


class RealSecretStore(SecretStore):
    """Stores tokens in the OS keychain under the jira-dash service name."""

    def __init__(self, service_name: str = SERVICE_NAME) -> None:
        self._service_name = service_name

    def store(self, profile_id: str, secret: str) -> None:
        try:
            keyring.set_password(self._service_name, profile_id, secret)
        except KeyringError as e:
            raise SecretStoreError(f"Could not store token for '{profile_id}': {e}") from e

    def retrieve(self, profile_id: str) -> str:
        try:
            secret = keyring.get_password(self._service_name, profile_id)
        except KeyringError as e:
            raise SecretStoreError(f"Could not read token for '{profile_id}': {e}") from e
        if secret is None:
            raise SecretStoreError(
                f"No API token stored for profile '{profile_id}'. "
                f"Run 'jira-dash auth set-token {profile_id}'."
            )
        return secret

    def delete(self, profile_id: str) -> None:
        try:
            keyring.delete_password(self._service_name, profile_id)
        except PasswordDeleteError:
            return
        except KeyringError as e:
            raise SecretStoreError(f"Could not delete token for '{profile_id}': {e}") from e

    def exists(self, profile_id: str) -> bool:
        try:
            return keyring.get_password(self._service_name, profile_id) is not None
        except KeyringError:
            return False
