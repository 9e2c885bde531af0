"""
app/api/routers package marker.
"""

from app.api.routers.data_export import router as data_export_router
from app.api.routers.data_import import router as data_import_router

__all__ = [
    "data_export_router",
    "data_import_router",
]
