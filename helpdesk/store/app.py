from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, FastAPI, HTTPException, Request, status

from helpdesk.core.config import get_settings
from helpdesk.core.logging import configure_logging, init_tracer, shutdown_tracer

from .database import Document, JsonFileDatabase

router = APIRouter()


async def get_database(request: Request) -> JsonFileDatabase:
    database = getattr(request.app.state, "database", None)
    if database is None:
        raise HTTPException(status_code=503, detail="Record store is not configured")
    return database


DatabaseDep = Annotated[JsonFileDatabase, Depends(get_database)]
DocumentBody = Annotated[dict[str, Any], Body()]


@router.get("/echo", summary="Echo query parameters")
async def echo(request: Request) -> dict[str, str]:
    return dict(request.query_params)


@router.get("/{collection}", summary="List documents of a collection")
async def list_documents(collection: str, request: Request, database: DatabaseDep) -> list[Document]:
    return database.list(collection, dict(request.query_params))


@router.get("/{collection}/{document_id}")
async def get_document(collection: str, document_id: str, database: DatabaseDep) -> Document:
    document = database.get(collection, document_id)
    if document is None:
        raise HTTPException(status_code=404, detail=f"{collection}/{document_id} not found")
    return document


@router.post("/{collection}", status_code=status.HTTP_201_CREATED)
async def create_document(collection: str, payload: DocumentBody, database: DatabaseDep) -> Document:
    try:
        return database.insert(collection, payload)
    except KeyError as exc:
        raise HTTPException(status_code=409, detail=str(exc.args[0])) from exc


@router.put("/{collection}/{document_id}")
async def replace_document(
    collection: str, document_id: str, payload: DocumentBody, database: DatabaseDep
) -> Document:
    document = database.replace(collection, document_id, payload)
    if document is None:
        raise HTTPException(status_code=404, detail=f"{collection}/{document_id} not found")
    return document


@router.patch("/{collection}/{document_id}")
async def patch_document(
    collection: str, document_id: str, payload: DocumentBody, database: DatabaseDep
) -> Document:
    document = database.patch(collection, document_id, payload)
    if document is None:
        raise HTTPException(status_code=404, detail=f"{collection}/{document_id} not found")
    return document


@router.delete("/{collection}/{document_id}")
async def delete_document(collection: str, document_id: str, database: DatabaseDep) -> dict[str, Any]:
    if not database.delete(collection, document_id):
        raise HTTPException(status_code=404, detail=f"{collection}/{document_id} not found")
    return {}


@asynccontextmanager
async def lifespan(app: FastAPI):  # pragma: no cover - executed by framework
    settings = get_settings()
    configure_logging(settings, logger_name="helpdesk.store")
    tracer_provider = init_tracer(settings)
    if getattr(app.state, "database", None) is None:
        app.state.database = JsonFileDatabase(settings.store_db_path)
    try:
        yield
    finally:
        shutdown_tracer(tracer_provider)


def create_store_app(database: JsonFileDatabase | None = None) -> FastAPI:
    app = FastAPI(title="Helpdesk Record Store", lifespan=lifespan)
    app.state.database = database
    app.include_router(router)
    return app


app = create_store_app()
