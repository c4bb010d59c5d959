"""
Password hashing.

Argon2id through passlib. The digest is a PHC string
($argon2id$v=19$m=65536,t=1,p=2$<salt>$<hash>) so it carries its own salt
and cost parameters and verification needs nothing else.
"""
from passlib.context import CryptContext

# 64 MiB memory, 1 pass, 2 lanes, 16-byte salt, 32-byte key
argon2_context = CryptContext(
    schemes=['argon2'],
    deprecated='auto',
    argon2__type='id',
    argon2__memory_cost=64 * 1024,
    argon2__rounds=1,
    argon2__parallelism=2,
    argon2__salt_size=16,
    argon2__digest_size=32,
)


def get_password_hash(password: str) -> str:
    return argon2_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Constant-time check of a plaintext password against a stored digest.

    Returns False on mismatch. Raises ValueError if hashed_password is not
    a well-formed argon2 digest.
    """
    if not hashed_password:
        raise ValueError("empty password hash")
    return argon2_context.verify(plain_password, hashed_password)
