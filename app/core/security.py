import secrets


def generate_token(nbytes: int = 32) -> str:
    """Generate a cryptographically secure random token."""
    return secrets.token_urlsafe(nbytes)


def generate_verification_token() -> str:
    """Generate a single-use email verification token."""
    return generate_token()


def generate_unsubscribe_token() -> str:
    """Generate a long-lived unsubscribe token for a subscriber."""
    return generate_token(24)
