import json
import logging
from typing import Any, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from . import models
from .auth import hash_password, is_valid_email, verify_password
from .errors import AuthError, ConflictError, ExecutionError, ValidationError

logger = logging.getLogger(__name__)


def get_user_by_email(db: Session, email: str) -> Optional[models.User]:
    return db.query(models.User).filter(models.User.email == email).first()


def create_user(
    db: Session,
    email: Optional[str],
    password: Optional[str],
    full_name: Optional[str],
) -> models.User:
    """Register a new account keyed by email.

    The pre-check gives the common case a clean message; the unique constraint
    on ``users.email`` catches the concurrent case, which is reported the same way.

    Raises:
        ValidationError: malformed email or missing password.
        ConflictError: the email is already registered.
        ExecutionError: any other database failure.
    """
    if not is_valid_email(email):
        raise ValidationError("Invalid email format")
    if not password:
        raise ValidationError("Password is required")

    try:
        existing = get_user_by_email(db, email)
    except SQLAlchemyError as exc:
        raise ExecutionError.from_db(exc) from exc
    if existing:
        logger.info("Signup rejected, email already registered")
        raise ConflictError("Email address already exists")

    user = models.User(
        login_id=email,
        email=email,
        password_hash=hash_password(password),
        full_name=full_name,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        try:
            taken = get_user_by_email(db, email) is not None
        except SQLAlchemyError as lookup_exc:
            raise ExecutionError.from_db(lookup_exc) from lookup_exc
        if taken:
            raise ConflictError("Email address already exists") from exc
        raise ExecutionError.from_db(exc) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        raise ExecutionError.from_db(exc) from exc

    db.refresh(user)
    logger.info("Created user id=%s", user.id)
    return user


def authenticate(db: Session, email: Optional[str], password: Optional[str]) -> models.User:
    """Return the user for a matching email/password pair.

    Unknown email, missing password and wrong password fail identically.
    """
    if not password:
        logger.info("Failed login attempt")
        raise AuthError("Invalid email or password")
    try:
        user = get_user_by_email(db, email) if email else None
    except SQLAlchemyError as exc:
        raise ExecutionError.from_db(exc) from exc

    if user is None or not verify_password(password, user.password_hash):
        logger.info("Failed login attempt")
        raise AuthError("Invalid email or password")
    return user


def log_activity(
    db: Session,
    login_id: Optional[str],
    sql_query: Optional[str],
    execution_result: Any,
    success: Optional[bool],
) -> models.LearnerActivity:
    """Append one execution attempt. ``login_id`` is stored as given."""
    activity = models.LearnerActivity(
        login_id=login_id,
        sql_query=sql_query,
        execution_result=json.dumps(execution_result, default=str),
        success=success,
    )
    db.add(activity)
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Logging activity failed")
        raise ExecutionError.from_db(exc) from exc

    db.refresh(activity)
    return activity
