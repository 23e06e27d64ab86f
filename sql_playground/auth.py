import hmac
import logging
import re
from typing import Optional

from passlib.context import CryptContext

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def is_valid_email(email: Optional[str]) -> bool:
    """Shape check only (``local@domain.tld``), not RFC 5322."""
    return bool(email) and EMAIL_RE.match(email) is not None


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, stored: Optional[str]) -> bool:
    """Check ``plain_password`` against a stored hash.

    Rows written before hashing was introduced hold the password itself; those
    are compared in constant time.
    """
    if not stored:
        return False
    if pwd_context.identify(stored) is None:
        logger.warning("Verifying against a legacy plaintext password")
        return hmac.compare_digest(plain_password.encode("utf-8"), stored.encode("utf-8"))
    return pwd_context.verify(plain_password, stored)
