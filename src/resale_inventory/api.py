"""FastAPI router configuration."""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import crud, filters, schemas, stats
from .config import Settings, get_settings
from .repositories import CategoryRepository, ItemRepository
from .storage import JsonDocumentStore, StoreError

logger = logging.getLogger(__name__)

router = APIRouter()


def provide_settings() -> Settings:
    """Dependency returning the active :class:`Settings` instance."""

    return get_settings()


def get_store(request: Request) -> JsonDocumentStore:
    return request.app.state.store


def get_item_repository(store: JsonDocumentStore = Depends(get_store)) -> ItemRepository:
    return ItemRepository(store)


def get_category_repository(
    store: JsonDocumentStore = Depends(get_store),
) -> CategoryRepository:
    return CategoryRepository(store)


def _json_error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)


@router.get("/health", response_model=schemas.HealthStatus, tags=["system"])
def health_check(settings: Settings = Depends(provide_settings)) -> schemas.HealthStatus:
    return schemas.HealthStatus(environment=settings.environment)


@router.get("/items", response_model=List[schemas.InventoryItem], tags=["items"])
def list_items(
    category: Optional[str] = None,
    condition: Optional[str] = None,
    repository: ItemRepository = Depends(get_item_repository),
) -> List[schemas.InventoryItem]:
    return filters.filter_items(repository.load(), category=category, condition=condition)


@router.get("/items/facets", response_model=schemas.ItemFacets, tags=["items"])
def item_facets(repository: ItemRepository = Depends(get_item_repository)) -> schemas.ItemFacets:
    return filters.collect_facets(repository.load())


@router.post(
    "/items",
    response_model=schemas.InventoryItem,
    status_code=status.HTTP_201_CREATED,
    tags=["items"],
)
def create_item(
    payload: Dict[str, Any] = Body(...),
    repository: ItemRepository = Depends(get_item_repository),
) -> schemas.InventoryItem:
    return crud.create_item(repository, payload)


@router.delete("/items/{item_id}", response_model=schemas.OperationResult, tags=["items"])
def delete_item(
    item_id: int, repository: ItemRepository = Depends(get_item_repository)
) -> schemas.OperationResult:
    crud.delete_item(repository, item_id)
    return schemas.OperationResult()


@router.get("/categories", response_model=List[schemas.Category], tags=["categories"])
def list_categories(
    repository: CategoryRepository = Depends(get_category_repository),
) -> List[schemas.Category]:
    return repository.load()


@router.post(
    "/categories",
    response_model=schemas.Category,
    status_code=status.HTTP_201_CREATED,
    tags=["categories"],
)
def create_category(
    payload: schemas.CategoryCreate,
    repository: CategoryRepository = Depends(get_category_repository),
) -> schemas.Category:
    return crud.create_category(repository, payload)


@router.delete(
    "/categories/{category_id}", response_model=schemas.OperationResult, tags=["categories"]
)
def delete_category(
    category_id: int, repository: CategoryRepository = Depends(get_category_repository)
) -> schemas.OperationResult:
    crud.delete_category(repository, category_id)
    return schemas.OperationResult()


@router.get("/inventory", response_model=schemas.InventoryStats, tags=["inventory"])
def inventory_summary(
    repository: ItemRepository = Depends(get_item_repository),
) -> schemas.InventoryStats:
    return stats.compute_stats(repository.load())


@router.get("/inventory/stats", response_model=schemas.InventoryDashboard, tags=["inventory"])
def inventory_stats(
    settings: Settings = Depends(provide_settings),
    repository: ItemRepository = Depends(get_item_repository),
) -> schemas.InventoryDashboard:
    return stats.build_dashboard(repository.load(), settings.recent_items_limit)


def _describe_request_errors(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        message = error.get("msg", "invalid value")
        parts.append(f"{location}: {message}" if location else message)
    return "; ".join(parts) or "Invalid request"


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(crud.ValidationError)
    async def handle_validation_error(request: Request, exc: crud.ValidationError) -> JSONResponse:
        logger.info("Rejected %s %s: %s", request.method, request.url.path, exc)
        return _json_error(str(exc), status.HTTP_400_BAD_REQUEST)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return _json_error(_describe_request_errors(exc), status.HTTP_400_BAD_REQUEST)

    @app.exception_handler(StoreError)
    async def handle_store_error(request: Request, exc: StoreError) -> JSONResponse:
        logger.error("Storage failure on %s %s: %s", request.method, request.url.path, exc)
        return _json_error("Failed to save inventory data", status.HTTP_500_INTERNAL_SERVER_ERROR)

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return _json_error("Internal server error", status.HTTP_500_INTERNAL_SERVER_ERROR)


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    app = FastAPI(title=settings.app_name)
    app.state.store = JsonDocumentStore(settings.data_dir)
    app.dependency_overrides[provide_settings] = lambda: settings
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[origin.strip() for origin in settings.access_control_allow_origin.split(",")],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    _register_exception_handlers(app)
    app.include_router(router)
    return app


__all__ = ["create_app", "router"]
