from werkzeug.security import check_password_hash, generate_password_hash

# Fixed cost for every stored hash
HASH_METHOD = "pbkdf2:sha256:600000"
SALT_LENGTH = 16


def hash_password(password: str) -> str:
    return generate_password_hash(password, method=HASH_METHOD, salt_length=SALT_LENGTH)


def verify_password(password: str, password_hash: str) -> bool:
    """Check ``password`` against a stored hash. Malformed hashes never match."""
    if not password_hash or password is None:
        return False
    try:
        return check_password_hash(password_hash, password)
    except (ValueError, TypeError, AttributeError):
        return False
