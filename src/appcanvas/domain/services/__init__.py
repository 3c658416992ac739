"""Domain services for AppCanvas.

Services hold the business logic of tenant databases, their schemas and
records, and render-time evaluation.
"""

from appcanvas.domain.services.namespace_generator import NamespaceGenerator
from appcanvas.domain.services.record_service import OwnerScopedDataSource, RecordService
from appcanvas.domain.services.render_service import RenderService
from appcanvas.domain.services.schema_service import SchemaService
from appcanvas.domain.services.tenant_store_registry import TenantStoreRegistry

__all__ = [
    "NamespaceGenerator",
    "OwnerScopedDataSource",
    "RecordService",
    "RenderService",
    "SchemaService",
    "TenantStoreRegistry",
]
