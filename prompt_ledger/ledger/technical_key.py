"""Technical keys: short human-readable references to a saved version."""


def generate_technical_key(author_id: str, version: int, author_email: str | None = None) -> str:
    """Build "<username>_v<version>" from the author's email.

    Falls back to "user_<first 8 chars of author_id>_v<version>" when no
    email is known.
    """
    if author_email and "@" in author_email:
        username = author_email.split("@")[0]
        if username:
            return f"{username}_v{version}"
    return f"user_{author_id[:8]}_v{version}"
