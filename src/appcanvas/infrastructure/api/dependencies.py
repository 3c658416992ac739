"""FastAPI dependencies for request context and services.

The owner id is set by the authentication gateway in front of the
service; requests without it are rejected.
"""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from appcanvas.core.config import get_settings
from appcanvas.core.logging import bind_owner_id, get_logger
from appcanvas.domain.services import (
    RecordService,
    RenderService,
    SchemaService,
    TenantStoreRegistry,
)
from appcanvas.infrastructure.persistence.database import get_db_session
from appcanvas.infrastructure.storage import StorageDriver, create_storage_driver

logger = get_logger(__name__)


def get_owner_id(request: Request) -> str:
    """Extract the owner id from the configured header.

    Raises:
        HTTPException: 401 if the header is missing or blank.
    """
    header = get_settings().owner_header
    owner_id = (request.headers.get(header) or "").strip()
    if not owner_id:
        logger.debug("Request without owner id", header=header, path=request.url.path)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Missing {header} header",
        )
    bind_owner_id(owner_id)
    return owner_id


def get_storage_driver(request: Request) -> StorageDriver:
    """Get the storage driver from app state, creating it on first use."""
    if not hasattr(request.app.state, "storage_driver"):
        request.app.state.storage_driver = create_storage_driver(get_settings())
    return request.app.state.storage_driver


OwnerId = Annotated[str, Depends(get_owner_id)]
DbSession = Annotated[AsyncSession, Depends(get_db_session)]


def get_registry(
    session: DbSession,
    driver: Annotated[StorageDriver, Depends(get_storage_driver)],
) -> TenantStoreRegistry:
    return TenantStoreRegistry(session, driver)


Registry = Annotated[TenantStoreRegistry, Depends(get_registry)]


def get_schema_service(session: DbSession, registry: Registry) -> SchemaService:
    return SchemaService(session, registry)


def get_record_service(session: DbSession, registry: Registry) -> RecordService:
    return RecordService(session, registry)


def get_render_service() -> RenderService:
    return RenderService()


Schemas = Annotated[SchemaService, Depends(get_schema_service)]
Records = Annotated[RecordService, Depends(get_record_service)]
Renderer = Annotated[RenderService, Depends(get_render_service)]
