from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text, func

from .config import settings
from .database import Base


class User(Base):
    __tablename__ = "users"
    __table_args__ = {"schema": settings.tracking_schema}

    id = Column(Integer, primary_key=True, index=True)
    login_id = Column(String, nullable=False)
    email = Column(String, unique=True, nullable=False, index=True)
    # Column keeps its historical name; new accounts store a bcrypt hash here.
    password_hash = Column("password", String, nullable=False)
    full_name = Column(String)


class LearnerActivity(Base):
    __tablename__ = "learner_activity"
    __table_args__ = {"schema": settings.tracking_schema}

    id = Column(Integer, primary_key=True, index=True)
    login_id = Column(String, nullable=False, index=True)
    sql_query = Column(Text)
    execution_result = Column(Text)  # JSON text
    success = Column(Boolean)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
