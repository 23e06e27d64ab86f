from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from .. import catalog, schemas
from ..config import settings
from ..database import get_primary_db

router = APIRouter(prefix="/api", tags=["catalog"])


@router.get("/tables", response_model=schemas.TablesResponse)
def list_tables(db: Session = Depends(get_primary_db)):
    names = catalog.list_tables(db, settings.primary_schema)
    return {"tables": [{"name": name} for name in names]}


@router.post(
    "/query",
    response_model=schemas.QueryResponse,
    responses={
        400: {"model": schemas.ErrorResponse},
        500: {"model": schemas.ErrorResponse},
    },
)
def run_query(payload: schemas.QueryRequest, db: Session = Depends(get_primary_db)):
    """Forward a SELECT statement to the primary store.

    - Missing SQL or anything not starting with SELECT is rejected with 400.
    - Store errors are returned as 500 with the driver's message.
    """
    result = catalog.run_query(db, payload.sql)
    return schemas.QueryResponse(data=result.rows, row_count=result.row_count)


@router.get("/schema/{table_name}", response_model=schemas.TableSchemaResponse)
def describe_table(table_name: str, db: Session = Depends(get_primary_db)):
    # An unknown table answers 200 with no columns.
    described = catalog.describe_table(db, table_name, settings.primary_schema)
    return schemas.TableSchemaResponse(
        table_name=described.table_name,
        columns=[schemas.ColumnOut.model_validate(col) for col in described.columns],
    )
