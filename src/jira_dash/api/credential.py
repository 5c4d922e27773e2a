"""Credentials for authenticating against the Jira REST API."""

import base64
from dataclasses import dataclass

AUTH_SCHEME = "Basic"


@dataclass(frozen=True)
class Credential:
    """Email plus a pre-encoded Authorization header value.

    Build with from_secret(). The plaintext secret is consumed during
    construction and never stored; only the encoded header survives.
    repr() redacts the header so credentials can appear in debug logs.

    Attributes:
        email: Account email used for Basic authentication
        encoded_header: Ready-to-send Authorization header value
    """

    email: str
    encoded_header: str

    @classmethod
    def from_secret(cls, email: str, secret: str) -> "Credential":
        """Encode email and API token into a Basic Authorization value.

        Args:
            email: Account email
            secret: API token retrieved from the secret store

        Returns:
            Credential holding only the encoded header
        """
        raw = f"{email}:{secret}".encode()
        encoded = base64.b64encode(raw).decode("ascii")
        return cls(email=email, encoded_header=f"{AUTH_SCHEME} {encoded}")

    def header_value(self) -> str:
        """Return the value for the Authorization header."""
        return self.encoded_header

    def __repr__(self) -> str:
        return f"Credential(email={self.email!r}, encoded_header='<redacted>')"
