from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Accepts and emits camelCase keys while keeping snake_case attributes."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


# ----- Catalog / query -----


class QueryRequest(BaseModel):
    # Optional so a missing value is reported as 400 by the query proxy, not 422.
    sql: Optional[str] = None


class QueryResponse(CamelModel):
    success: bool = True
    data: List[Dict[str, Any]]
    row_count: int


class TableOut(BaseModel):
    name: str


class TablesResponse(BaseModel):
    tables: List[TableOut]


class ColumnOut(CamelModel):
    name: str
    type: Optional[str] = None
    nullable: bool
    default: Optional[str] = None
    is_primary_key: bool = False


class TableSchemaResponse(CamelModel):
    success: bool = True
    table_name: str
    columns: List[ColumnOut]


# ----- Accounts -----


class SignupRequest(CamelModel):
    email: Optional[str] = None
    password: Optional[str] = None
    full_name: Optional[str] = None


class LoginRequest(CamelModel):
    email: Optional[str] = None
    password: Optional[str] = None


class UserOut(CamelModel):
    """Identity fields returned to the client; the password never leaves the store."""

    id: int
    login_id: str
    email: str
    full_name: Optional[str] = None


class AuthResponse(CamelModel):
    success: bool = True
    message: str
    user: UserOut


# ----- Activity -----


class LogActivityRequest(CamelModel):
    login_id: Optional[str] = None
    sql_query: Optional[str] = None
    execution_result: Any = None
    success: Optional[bool] = None


class ActivityOut(CamelModel):
    id: int
    login_id: str
    sql_query: Optional[str] = None
    execution_result: Optional[str] = None
    success: Optional[bool] = None
    created_at: Optional[datetime] = None


class ActivityResponse(CamelModel):
    success: bool = True
    message: str
    activity: ActivityOut


# ----- Health -----


class MessageResponse(BaseModel):
    message: str


class ConnectionCheckResponse(BaseModel):
    success: bool = True
    message: str
    time: Any = Field(..., description="Current time as reported by the store.")


class ErrorResponse(BaseModel):
    error: str = Field(..., description="Error description.")
