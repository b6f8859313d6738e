import hashlib
import secrets

API_TOKEN_PREFIX = "conf_tk_"
API_TOKEN_RANDOM_BYTES = 24  # 24 bytes → 48 hex chars


def generate_api_token() -> str:
    """Generate a new API token: conf_tk_ + 48 hex chars."""
    random_part = secrets.token_hex(API_TOKEN_RANDOM_BYTES)
    return f"{API_TOKEN_PREFIX}{random_part}"


def hash_api_token(token: str) -> str:
    """SHA-256 hash of the full API token."""
    return hashlib.sha256(token.encode()).hexdigest()


def get_token_prefix(token: str) -> str:
    """Return the first 12 chars of the token for display (conf_tk_ + 4 hex)."""
    return token[:12]
