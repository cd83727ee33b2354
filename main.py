import logging
from typing import Any, Optional

from fastapi import Depends, FastAPI, HTTPException, Request
from pydantic import ValidationError as SchemaValidationError
from sqlalchemy.orm import Session

from config import get_settings
from database import SessionLocal
from errors import ForbiddenError, LedgerError, NotFoundError
from identity import read_identity_token
from schemas import (
    CategoryOut,
    DeleteResult,
    LedgerSummaryOut,
    TransactionDeleteIn,
    TransactionOut,
    first_error,
)
from services import LedgerService

settings = get_settings()
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Finance Ledger")


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def current_owner(request: Request) -> str:
    scheme, _, token = request.headers.get("Authorization", "").partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise HTTPException(
            status_code=401,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    owner_id = read_identity_token(token.strip())
    if not owner_id:
        raise HTTPException(
            status_code=401,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return owner_id


def get_ledger(
    db: Session = Depends(get_db), owner_id: str = Depends(current_owner)
) -> LedgerService:
    return LedgerService(db, owner_id)


def http_error(exc: LedgerError) -> HTTPException:
    if isinstance(exc, NotFoundError):
        return HTTPException(status_code=404, detail=str(exc))
    if isinstance(exc, ForbiddenError):
        return HTTPException(status_code=403, detail=str(exc))
    return HTTPException(status_code=400, detail=str(exc))


async def json_body(request: Request) -> dict[str, Any]:
    raw = await request.body()
    if not raw:
        return {}
    try:
        body = await request.json()
    except ValueError as exc:
        raise HTTPException(status_code=400, detail="Malformed JSON body") from exc
    if not isinstance(body, dict):
        raise HTTPException(status_code=400, detail="Expected a JSON object")
    return body


def query_int(request: Request, name: str) -> Optional[int]:
    value = request.query_params.get(name)
    if value is None or value == "":
        return None
    try:
        return int(value)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=f"{name} must be an integer") from exc


def _dump(model) -> Any:
    return model.model_dump(mode="json", by_alias=True)


@app.get("/healthz")
def healthz():
    return {"status": "ok"}


@app.get("/api/categories.getAll")
def categories_get_all(ledger: LedgerService = Depends(get_ledger)):
    try:
        categories = ledger.list_categories()
    except LedgerError as exc:
        raise http_error(exc) from exc
    return [_dump(CategoryOut.model_validate(c)) for c in categories]


@app.post("/api/categories.create")
async def categories_create(
    request: Request, ledger: LedgerService = Depends(get_ledger)
):
    body = await json_body(request)
    try:
        category = ledger.create_category(body)
    except LedgerError as exc:
        raise http_error(exc) from exc
    return _dump(CategoryOut.model_validate(category))


@app.post("/api/categories.createDefaultCategories")
def categories_create_defaults(ledger: LedgerService = Depends(get_ledger)):
    try:
        categories = ledger.seed_default_categories()
    except LedgerError as exc:
        raise http_error(exc) from exc
    return [_dump(CategoryOut.model_validate(c)) for c in categories]


@app.get("/api/transactions.getAll")
def transactions_get_all(ledger: LedgerService = Depends(get_ledger)):
    try:
        summary = ledger.get_all()
    except LedgerError as exc:
        raise http_error(exc) from exc
    payload = _dump(LedgerSummaryOut.from_summary(summary))
    payload.pop("currentMonth", None)
    return payload


@app.get("/api/transactions.getByMonth")
def transactions_get_by_month(
    request: Request, ledger: LedgerService = Depends(get_ledger)
):
    year = query_int(request, "year")
    month = query_int(request, "month")
    try:
        summary = ledger.get_by_month(year, month)
    except LedgerError as exc:
        raise http_error(exc) from exc
    return _dump(LedgerSummaryOut.from_summary(summary))


@app.post("/api/transactions.create")
async def transactions_create(
    request: Request, ledger: LedgerService = Depends(get_ledger)
):
    body = await json_body(request)
    try:
        txn = ledger.create_transaction(body)
    except LedgerError as exc:
        raise http_error(exc) from exc
    return _dump(TransactionOut.model_validate(txn))


@app.post("/api/transactions.delete")
async def transactions_delete(
    request: Request, ledger: LedgerService = Depends(get_ledger)
):
    body = await json_body(request)
    try:
        data = TransactionDeleteIn.model_validate(body)
    except SchemaValidationError as exc:
        raise HTTPException(status_code=400, detail=first_error(exc)) from exc
    try:
        ledger.delete_transaction(data.id)
    except LedgerError as exc:
        raise http_error(exc) from exc
    return _dump(DeleteResult())


def main():
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=False)


if __name__ == "__main__":
    main()
