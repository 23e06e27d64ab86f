from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .. import schemas
from ..database import get_tracking_db
from ..errors import ExecutionError

router = APIRouter(prefix="/api", tags=["health"])


@router.get("/test", response_model=schemas.MessageResponse)
def test_backend():
    return {"message": "Backend server is working with PostgreSQL!"}


@router.get("/test-supabase", response_model=schemas.ConnectionCheckResponse)
def test_tracking_store(db: Session = Depends(get_tracking_db)):
    """Round-trip to the user/activity store and report its clock."""
    try:
        now = db.execute(text("SELECT CURRENT_TIMESTAMP AS now")).scalar_one()
    except SQLAlchemyError as exc:
        raise ExecutionError.from_db(exc) from exc
    return {"success": True, "message": "Supabase connection working!", "time": now}
