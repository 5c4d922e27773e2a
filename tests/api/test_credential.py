"""Tests for Credential."""

import base64

from jira_dash.api.credential import Credential


def test_header_value_starts_with_basic_scheme() -> None:
    """header_value() carries the Basic scheme prefix."""
    credential = Credential.from_secret("user@x.com", "tok")

    assert credential.header_value().startswith("Basic ")


def test_header_value_decodes_to_email_and_secret() -> None:
    """The encoded part decodes to exactly "email:secret"."""
    credential = Credential.from_secret("user@x.com", "tok")

    encoded = credential.header_value().removeprefix("Basic ")

    assert base64.b64decode(encoded).decode() == "user@x.com:tok"


def test_secret_containing_colon_is_preserved() -> None:
    """Only the first colon separates email from secret."""
    credential = Credential.from_secret("a@b.c", "to:k:en")

    encoded = credential.header_value().removeprefix("Basic ")

    assert base64.b64decode(encoded).decode() == "a@b.c:to:k:en"


def test_repr_redacts_header() -> None:
    """repr() never shows the encoded header."""
    credential = Credential.from_secret("user@x.com", "tok")

    text = repr(credential)

    assert "user@x.com" in text
    assert credential.encoded_header not in text
    assert "<redacted>" in text


def test_credential_does_not_keep_the_secret() -> None:
    """Only email and the encoded header are stored."""
    credential = Credential.from_secret("user@x.com", "super-secret")

    assert "super-secret" not in vars(credential).values()
    assert set(vars(credential)) == {"email", "encoded_header"}
