from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from .. import crud, schemas
from ..database import get_tracking_db

router = APIRouter(prefix="/api", tags=["auth"])


@router.post(
    "/signup",
    response_model=schemas.AuthResponse,
    responses={400: {"model": schemas.ErrorResponse}},
)
def signup(payload: schemas.SignupRequest, db: Session = Depends(get_tracking_db)):
    user = crud.create_user(db, payload.email, payload.password, payload.full_name)
    return schemas.AuthResponse(
        message="User created successfully",
        user=schemas.UserOut.model_validate(user),
    )


@router.post(
    "/login",
    response_model=schemas.AuthResponse,
    responses={401: {"model": schemas.ErrorResponse}},
)
def login(payload: schemas.LoginRequest, db: Session = Depends(get_tracking_db)):
    """Check credentials. Nothing is issued; the response itself is the proof."""
    user = crud.authenticate(db, payload.email, payload.password)
    return schemas.AuthResponse(
        message="Login successful",
        user=schemas.UserOut.model_validate(user),
    )
