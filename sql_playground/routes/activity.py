from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from .. import crud, schemas
from ..database import get_tracking_db

router = APIRouter(prefix="/api", tags=["activity"])


@router.post(
    "/log-activity",
    response_model=schemas.ActivityResponse,
    responses={500: {"model": schemas.ErrorResponse}},
)
def log_activity(payload: schemas.LogActivityRequest, db: Session = Depends(get_tracking_db)):
    activity = crud.log_activity(
        db,
        login_id=payload.login_id,
        sql_query=payload.sql_query,
        execution_result=payload.execution_result,
        success=payload.success,
    )
    return schemas.ActivityResponse(
        message="Activity logged successfully",
        activity=schemas.ActivityOut.model_validate(activity),
    )
