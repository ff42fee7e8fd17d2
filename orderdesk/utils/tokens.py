import secrets


def make_share_token(length: int = 24) -> str:
    # URL-safe, goes straight into the public storefront link
    return secrets.token_urlsafe(length)
