import secrets

TOKEN_BYTES = 32


def issue_token() -> str:
    """Return a fresh bearer token for a battle request's accept/reject links.

    The token is drawn from the OS CSPRNG and carries no information about
    the request it is attached to; possessing it is the only credential the
    magic link needs.
    """
    return secrets.token_hex(TOKEN_BYTES)


def redact_token(token: str) -> str:
    return f"{token[:6]}..." if token else ""
