"""
Lifecycle REST routes.

Every resource gets the same endpoints under ``/v1/{name}``; the record
endpoints take a JSON object body and all of them answer with the response
envelope.
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends
from sqlalchemy.orm import Session

from .auth import get_actor
from .config import get_settings
from .db.base import get_db
from .db.store import RecordStore
from .i18n import Translator
from .lifecycle.actor import ActorContext
from .lifecycle.changelog import ChangeLog
from .lifecycle.controller import LifecycleController
from .lifecycle.resource import ResourceDefinition
from .mirror.base import DocumentMirror


def build_controller(
    resource: ResourceDefinition, mirror: Optional[DocumentMirror] = None
) -> LifecycleController:
    """Build the controller for ``resource`` from the current settings."""
    settings = get_settings()
    return LifecycleController(
        resource,
        translator=Translator(settings.language),
        mirror=mirror,
        change_log=ChangeLog(
            utc_format=settings.timestamp_utc_format,
            local_format=settings.timestamp_local_format,
            tz_name=settings.timezone,
        ),
        page_size=settings.page_size,
    )


def build_router(
    resource: ResourceDefinition, mirror: Optional[DocumentMirror] = None
) -> APIRouter:
    """Create the router serving ``resource``."""
    controller = build_controller(resource, mirror)
    router = APIRouter(prefix=f"/v1/{resource.name}", tags=[resource.name])

    @router.post("/data")
    def list_records(
        params: Optional[Dict[str, Any]] = Body(default=None),
        db: Session = Depends(get_db),
        actor: ActorContext = Depends(get_actor),
    ) -> Dict[str, Any]:
        """List records with pagination, sort and filters."""
        return controller.list(RecordStore(db), params or {}, actor)

    @router.post("/view")
    def view_record(
        params: Dict[str, Any] = Body(...),
        db: Session = Depends(get_db),
        actor: ActorContext = Depends(get_actor),
    ) -> Dict[str, Any]:
        """Get one record by id."""
        return controller.find_one(RecordStore(db), params, actor)

    @router.post("/create")
    def create_record(
        params: Dict[str, Any] = Body(...),
        db: Session = Depends(get_db),
        actor: ActorContext = Depends(get_actor),
    ) -> Dict[str, Any]:
        """Create a record in Draft status."""
        return controller.create(RecordStore(db), params, actor)

    @router.put("/update")
    def update_record(
        params: Dict[str, Any] = Body(...),
        db: Session = Depends(get_db),
        actor: ActorContext = Depends(get_actor),
    ) -> Dict[str, Any]:
        """Update a record; ``lock_version`` must be current."""
        return controller.update(RecordStore(db), params, actor)

    @router.delete("/delete")
    def delete_record(
        params: Dict[str, Any] = Body(...),
        db: Session = Depends(get_db),
        actor: ActorContext = Depends(get_actor),
    ) -> Dict[str, Any]:
        """Soft delete a record by moving it to Deleted."""
        return controller.delete(RecordStore(db), params, actor)

    @router.post("/search")
    def search_records(
        params: Optional[Dict[str, Any]] = Body(default=None),
        db: Session = Depends(get_db),
        actor: ActorContext = Depends(get_actor),
    ) -> Dict[str, Any]:
        """List records from the document mirror."""
        return controller.search(RecordStore(db), params or {}, actor)

    @router.post("/resync")
    def resync_records(
        db: Session = Depends(get_db),
        actor: ActorContext = Depends(get_actor),
    ) -> Dict[str, Any]:
        """Mirror again every row whose earlier mirror write failed."""
        return controller.resync(RecordStore(db), actor)

    return router
