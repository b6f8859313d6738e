from app.core.security import generate_api_token, get_token_prefix, hash_api_token


def test_generate_api_token_format():
    token = generate_api_token()
    assert token.startswith("conf_tk_")
    assert len(token) == 8 + 48  # prefix + 48 hex chars


def test_generate_api_token_unique():
    tokens = {generate_api_token() for _ in range(100)}
    assert len(tokens) == 100


def test_hash_api_token_deterministic():
    token = generate_api_token()
    assert hash_api_token(token) == hash_api_token(token)


def test_hash_api_token_different_tokens():
    t1, t2 = generate_api_token(), generate_api_token()
    assert hash_api_token(t1) != hash_api_token(t2)


def test_get_token_prefix():
    assert get_token_prefix("conf_tk_abcdef1234567890") == "conf_tk_abcd"
