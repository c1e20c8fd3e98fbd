"""
Record lifecycle controller.

Runs the guards in a fixed order for each operation and builds the response
envelope. One controller is built per resource type; the store (one
database session) and the actor are passed into every call, so nothing
mutable is shared between requests.

Pipelines:

- create: shape check -> status Draft -> business validation -> insert
- update: id check -> load -> shape check -> superadmin gate -> lock
  version presence -> business validation (schema + status transition) ->
  dependency guard -> no-op guard -> conditional write
- delete: as update, with status forced to Deleted and the delete no-op
  check
- find_one / list: shape check -> lookup, with ``lock_version`` stripped
  and change-log times rendered in local time
- search: list served from the document mirror
- resync: re-mirror rows flagged as sync failed (superadmin only)

Every guard raises a ``LifecycleError``; none is caught here.
"""

from functools import partial
from typing import TYPE_CHECKING, Any, Dict, Mapping, Optional

import structlog

from ..i18n import Translator
from .actor import ActorContext
from .changelog import CHANGE_LOG_KEY, ChangeLog, detail_info_with, previous_change_log
from .changes import ChangeTracker
from .dependencies import DependencyGuard
from .envelope import EnvelopeBuilder
from .enums import OPTIMISTIC_LOCK, Scenario, Status
from .errors import BadRequest, ErrorCollector, Forbidden, NotFound, ValidationFailed
from .fields import ID_KEY, check_allowed_fields, parse_int, validate_params
from .locking import OptimisticLockGuard
from .pagination import ListQuery, build_list_query
from .resource import ResourceDefinition
from .transitions import StatusTransitionEngine
from ..mirror import filters
from ..mirror.base import DocumentMirror, NullMirror, SafeMirror

if TYPE_CHECKING:
    from ..db.store import RecordStore

logger = structlog.get_logger()


class LifecycleController:
    """Create, update, delete, find and list records of one resource."""

    def __init__(
        self,
        resource: ResourceDefinition,
        translator: Optional[Translator] = None,
        mirror: Optional[DocumentMirror] = None,
        change_log: Optional[ChangeLog] = None,
        page_size: int = 10,
    ):
        self.resource = resource
        self.translator = translator or Translator()
        self.transitions = StatusTransitionEngine(resource.transitions, self.translator)
        self.lock_guard = OptimisticLockGuard(self.translator)
        self.change_tracker = ChangeTracker(self.translator)
        self.dependency_guard = DependencyGuard(
            resource.protected_fields,
            resource.dependencies,
            self.translator,
            disallowed=resource.transitions.disallowed,
        )
        self.envelope = EnvelopeBuilder(self.translator)
        self.mirror = mirror or NullMirror()
        self.change_log = change_log or ChangeLog()
        self.page_size = page_size

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def create(
        self, store: "RecordStore", params: Mapping[str, Any], actor: ActorContext
    ) -> Dict[str, Any]:
        t = self.translator.t
        resource = self.resource

        check_allowed_fields(params, resource.allowed_fields(Scenario.CREATE), self.translator)

        business_in = {
            k: v for k, v in params.items() if k not in (ID_KEY, "status")
        }
        business, errors = resource.validate_business_fields(
            Scenario.CREATE, business_in, self.translator
        )
        if errors:
            raise ValidationFailed(t("createRecordFailed"), errors)

        values = {
            **business,
            "status": int(Status.DRAFT),
            OPTIMISTIC_LOCK: 1,
            "detail_info": detail_info_with(None, self.change_log.on_insert(actor.username)),
        }
        record = store.insert(resource.model, values)
        data = record.to_dict()

        logger.info(
            "Record created",
            resource=resource.name,
            record_id=record.id,
            actor=actor.username,
        )
        self._mirror(store, data)
        return self.envelope.success(data, t("createRecordSuccess"))

    def update(
        self, store: "RecordStore", params: Mapping[str, Any], actor: ActorContext
    ) -> Dict[str, Any]:
        return self._mutate(store, params, actor, Scenario.UPDATE)

    def delete(
        self, store: "RecordStore", params: Mapping[str, Any], actor: ActorContext
    ) -> Dict[str, Any]:
        return self._mutate(store, params, actor, Scenario.DELETE)

    def find_one(
        self, store: "RecordStore", params: Mapping[str, Any], actor: ActorContext
    ) -> Dict[str, Any]:
        resource = self.resource
        record_id = validate_params(params, Scenario.VIEW, self.translator)
        check_allowed_fields(params, resource.allowed_fields(Scenario.VIEW), self.translator)

        conditions = self._view_conditions(params)
        record = store.get(resource.model, record_id, conditions)
        if record is None:
            raise NotFound(self.translator.t("dataNotFound"))

        return self.envelope.success(
            self._read(record.to_dict()), self.translator.t("viewRecordSuccess")
        )

    def list(
        self, store: "RecordStore", params: Mapping[str, Any], actor: ActorContext
    ) -> Dict[str, Any]:
        resource = self.resource
        query = self._list_query(params)
        rows, total_count = store.search(resource.model, query)
        return self.envelope.page(
            [self._read(row.to_dict()) for row in rows], query.page, total_count
        )

    def search(
        self, store: "RecordStore", params: Mapping[str, Any], actor: ActorContext
    ) -> Dict[str, Any]:
        """List records from the document mirror instead of the database.

        Takes the same parameters as ``list``. An unreachable mirror yields an
        empty page.
        """
        resource = self.resource
        query = self._list_query(params)
        result = self._safe_mirror(store).search(
            resource.table_name,
            self._document_filter(query),
            page=query.page,
            page_size=query.page_size,
            sort_by=query.sort_by,
            sort_dir=query.sort_dir,
            projection={"sync": 0},
        )
        return self.envelope.page(
            [self._read(doc) for doc in result["documents"]],
            query.page,
            result["total_count"],
        )

    def resync(self, store: "RecordStore", actor: ActorContext) -> Dict[str, Any]:
        """Push every row flagged as sync failed to the mirror again."""
        if not actor.is_superadmin:
            raise Forbidden(self.translator.t("superadminOnly"))

        resource = self.resource
        records = [row.to_dict() for row in store.unsynced(resource.model)]
        failed = self._safe_mirror(store).upsert_many(resource.table_name, records, (ID_KEY,))
        synced = [r[ID_KEY] for r in records if r[ID_KEY] not in failed]
        store.clear_sync(resource.model, synced)

        logger.info(
            "Mirror resync finished",
            resource=resource.name,
            synced=len(synced),
            failed=len(failed),
            actor=actor.username,
        )
        return self.envelope.success(
            {"synced": len(synced), "failed": len(failed)},
            self.translator.t("resyncSuccess"),
        )

    # ------------------------------------------------------------------
    # Update / delete pipeline
    # ------------------------------------------------------------------

    def _mutate(
        self,
        store: "RecordStore",
        params: Mapping[str, Any],
        actor: ActorContext,
        scenario: Scenario,
    ) -> Dict[str, Any]:
        t = self.translator.t
        resource = self.resource

        record_id = validate_params(params, scenario, self.translator)

        record = store.get(resource.model, record_id)
        if record is None:
            raise NotFound(t("dataNotFound"))

        check_allowed_fields(params, resource.allowed_fields(scenario), self.translator)

        requested = {
            k: v for k, v in params.items() if k not in (ID_KEY, OPTIMISTIC_LOCK)
        }
        if scenario == Scenario.DELETE:
            requested["status"] = int(Status.DELETED)

        self._superadmin_gate(requested.get("status"), actor)

        expected_version = self.lock_guard.supplied_version(params)
        before = record.snapshot()

        # Business validation: schema errors and the status transition are
        # reported together.
        errors = ErrorCollector()
        business_in = {k: v for k, v in requested.items() if k != "status"}
        business, field_errors = resource.validate_business_fields(
            scenario, business_in, self.translator
        )
        errors.extend(field_errors)

        new_status: Optional[Status] = None
        if requested.get("status") is not None:
            try:
                new_status = Status.coerce(requested["status"])
            except ValueError:
                errors.add("status", t("invalidStatus", label=resource.label("status")))
            else:
                reason = self.transitions.check(Status(before["status"]), new_status, actor)
                if reason:
                    errors.add("status", reason)

        errors.raise_if_any(ValidationFailed, t(f"{scenario.value}RecordFailed"))

        after = {**before, **business}
        if new_status is not None:
            after["status"] = int(new_status)
        changes = self.change_tracker.diff(before, after)

        self.dependency_guard.check(
            record_id,
            changes,
            new_status,
            store.exists,
            resource.table_name,
            {name: resource.label(name) for name in resource.protected_fields},
        )

        if scenario == Scenario.DELETE:
            self.change_tracker.ensure_deleted(before["status"])
        else:
            self.change_tracker.ensure_updated(changes)

        change_log = self.change_log.on_write(
            previous_change_log(before["detail_info"]),
            after["status"],
            bool(changes),
            actor.username,
        )
        values = {
            **changes,
            "detail_info": detail_info_with(before["detail_info"], change_log),
        }

        new_version = self.lock_guard.apply(
            partial(store.conditional_update, resource.model),
            record_id,
            expected_version,
            values,
        )
        record = store.reload(resource.model, record_id)
        data = record.to_dict()

        logger.info(
            "Record updated" if scenario == Scenario.UPDATE else "Record deleted",
            resource=resource.name,
            record_id=record_id,
            lock_version=new_version,
            changed=sorted(changes),
            actor=actor.username,
        )
        self._mirror(store, data)
        return self.envelope.success(data, t(f"{scenario.value}RecordSuccess"))

    def _superadmin_gate(self, requested_status: Any, actor: ActorContext) -> None:
        """Restricted target statuses need the superadmin capability."""
        if requested_status is None or actor.is_superadmin:
            return
        try:
            status = Status.coerce(requested_status)
        except ValueError:
            # Reported by business validation
            return
        if status in self.resource.restricted_statuses:
            raise Forbidden(self.translator.t("superadminOnly"))

    def _list_query(self, params: Mapping[str, Any]) -> ListQuery:
        resource = self.resource
        check_allowed_fields(params, resource.allowed_fields(Scenario.LIST), self.translator)

        query = build_list_query(
            params,
            self.translator,
            default_page_size=self.page_size,
            sortable=resource.sortable_fields(),
            equal_fields=resource.equal_fields,
            like_fields=resource.like_fields,
        )
        return query

    def _view_conditions(self, params: Mapping[str, Any]) -> Dict[str, Any]:
        """Equality filters of a view request, integer columns parsed."""
        resource = self.resource
        integer_fields = resource.integer_fields()
        errors = ErrorCollector()
        conditions: Dict[str, Any] = {}
        for name, value in params.items():
            if name == ID_KEY:
                continue
            if name in integer_fields:
                number = parse_int(value)
                if number is None:
                    errors.add(name, self.translator.t("integer", label=resource.label(name)))
                    continue
                value = number
            conditions[name] = value
        errors.raise_if_any(BadRequest, self.translator.t("validationFailed"))
        return conditions

    def _document_filter(self, query: ListQuery) -> Dict[str, Any]:
        where: Dict[str, Any] = {}
        filters.status("status", query.status, where)
        for name, value in query.equal.items():
            filters.number_equal(name, value, where)
        for name, value in query.like.items():
            filters.string_like(name, value, where)
        for name, value in query.change_log_dates.items():
            filters.date_range(f"detail_info.{CHANGE_LOG_KEY}.{name}", value, where)
        for name, value in query.change_log_users.items():
            filters.string_like(f"detail_info.{CHANGE_LOG_KEY}.{name}", value, where)
        return filters.compose(where)

    def _read(self, data: Mapping[str, Any]) -> Dict[str, Any]:
        """Shape a stored record for read results.

        The lock version and sync flag are dropped and change-log timestamps
        are rendered in local time.
        """
        data = dict(data)
        data.pop(OPTIMISTIC_LOCK, None)
        data.pop("sync", None)
        info = data.get("detail_info")
        if isinstance(info, Mapping) and info.get(CHANGE_LOG_KEY):
            data["detail_info"] = {
                **info,
                CHANGE_LOG_KEY: self.change_log.to_local(info[CHANGE_LOG_KEY]),
            }
        return data

    def _safe_mirror(self, store: "RecordStore") -> SafeMirror:
        model = self.resource.model
        return SafeMirror(
            self.mirror,
            lambda collection, record_id: store.mark_sync_failed(model, record_id),
        )

    def _mirror(self, store: "RecordStore", data: Mapping[str, Any]) -> None:
        self._safe_mirror(store).upsert(self.resource.table_name, data)
