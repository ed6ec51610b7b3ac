"""
Persistence Gateway

Remote-first storage of analysis records with a local fallback.

- save: remote store first; on a permission or availability failure the
  record is redirected to the local store under a `local_` id, never dropped
- list / favorites / search: remote results merged with the owner's pending
  local records; served from local storage alone when the remote store fails
- update / delete: local ids act on local storage only
- restore: checks the remote store is writable, resubmits every pending local
  record and removes each from local storage as soon as it is accepted

Usage stats and analytics events are best-effort side effects of remote
writes.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
import logging

from sentiment_service.exceptions import (
    PermissionDeniedError,
    PersistenceFailure,
    RecordNotFound,
    StoreUnavailableError,
)
from sentiment_service.models.schemas import (
    AnalysisRecord,
    RecordOrigin,
    RecordUpdate,
    RestoreReport,
    SaveResult,
    StorageStatus,
)
from sentiment_service.services.document_store import RestDocumentStore
from sentiment_service.services.event_dispatcher import EventDispatcher
from sentiment_service.services.fallback import FallbackChain, Strategy
from sentiment_service.services.local_store import LocalRecordStore, is_local_id

logger = logging.getLogger(__name__)


FALLBACK_ERRORS = (PermissionDeniedError, StoreUnavailableError)
SEARCH_WINDOW = 100


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _sort_key(record: AnalysisRecord) -> datetime:
    created = record.created_at or datetime.min.replace(tzinfo=timezone.utc)
    if created.tzinfo is None:
        created = created.replace(tzinfo=timezone.utc)
    return created


class PersistenceGateway:
    """
    Stores analysis records for their owners

    Example:
        >>> gateway = PersistenceGateway(remote=None, local=LocalRecordStore(tmp_path))
        >>> result = gateway.save(record)
        >>> result.status
        <StorageStatus.SAVED_LOCALLY: 'saved_locally'>
    """

    def __init__(
        self,
        local: LocalRecordStore,
        remote: Optional[RestDocumentStore] = None,
        events: Optional[EventDispatcher] = None,
        collection: str = "sentiments",
        users_collection: str = "users"
    ):
        self.local = local
        self.remote = remote
        self.events = events or EventDispatcher()
        self.collection = collection
        self.users_collection = users_collection

        self.save_chain = FallbackChain(
            "persistence",
            [
                Strategy("remote", self._save_remote),
                Strategy("local", self._save_local),
            ],
            recoverable=FALLBACK_ERRORS
        )

        logger.info(
            f"PersistenceGateway initialized (remote={'on' if remote else 'off'}, "
            f"collection='{collection}')"
        )

    @property
    def remote_enabled(self) -> bool:
        return self.remote is not None

    def _require_remote(self) -> RestDocumentStore:
        if self.remote is None:
            raise StoreUnavailableError("Remote store not configured")
        return self.remote

    # ------------------------------------------------------------------
    # Save
    # ------------------------------------------------------------------

    def _save_remote(self, record: AnalysisRecord) -> SaveResult:
        remote = self._require_remote()
        record_id = remote.add(self.collection, record.to_document())
        return SaveResult(record_id=record_id, origin=RecordOrigin.REMOTE, status=StorageStatus.SAVED)

    def _save_local(self, record: AnalysisRecord) -> SaveResult:
        local_id = self.local.generate_id()
        stored = record.model_copy(update={"id": local_id, "origin": RecordOrigin.LOCAL})
        self.local.save_record(stored)
        return SaveResult(
            record_id=local_id,
            origin=RecordOrigin.LOCAL,
            status=StorageStatus.SAVED_LOCALLY
        )

    def save(self, record: AnalysisRecord) -> SaveResult:
        """
        Persist a finished analysis

        Never raises: if local storage fails too, the result says NOT_SAVED.
        """
        if record.created_at is None:
            record = record.model_copy(update={"created_at": _now()})

        try:
            outcome = self.save_chain.run(record)
        except PersistenceFailure as e:
            logger.error(f"Record for owner {record.owner_id} could not be saved anywhere: {e}")
            return SaveResult(status=StorageStatus.NOT_SAVED)

        result = outcome.value
        if result.origin == RecordOrigin.REMOTE:
            self._record_usage(record)
            self.events.dispatch("sentiment_analysis_saved", {
                "type": record.input_kind.value,
                "sentiment": record.primary_sentiment.label.value,
                "language": record.detected_language.iso_code,
            })
        else:
            logger.warning(
                f"Saved record {result.record_id} locally; it will sync when the "
                f"remote store is reachable"
            )
        return result

    def _record_usage(self, record: AnalysisRecord) -> None:
        """Increment the owner's usage counters (best effort)"""
        try:
            remote = self._require_remote()
            user = remote.get(self.users_collection, record.owner_id) or {}
            stats: Dict[str, Any] = dict(user.get("stats") or {})
            kind_key = f"{record.input_kind.value}Analyses"
            stats["totalAnalyses"] = int(stats.get("totalAnalyses", 0)) + 1
            stats[kind_key] = int(stats.get(kind_key, 0)) + 1
            remote.set(self.users_collection, record.owner_id, {
                **{k: v for k, v in user.items() if k != "id"},
                "stats": stats,
                "lastActiveAt": _now().isoformat(),
            })
        except PersistenceFailure as e:
            logger.warning(f"Could not update usage stats for {record.owner_id}: {e}")

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def _query(
        self,
        owner_id: str,
        limit: int,
        extra_filters: Optional[Dict[str, Any]] = None
    ) -> List[AnalysisRecord]:
        local_records = self.local.list_records(owner_id)
        if extra_filters and extra_filters.get("favorite"):
            local_records = [r for r in local_records if r.favorite]

        remote_records: List[AnalysisRecord] = []
        if self.remote is not None:
            try:
                documents = self.remote.query(
                    self.collection,
                    {"ownerId": owner_id, **(extra_filters or {})},
                    order_by="createdAt",
                    descending=True,
                    limit=limit
                )
                remote_records = [
                    AnalysisRecord.from_document(doc, origin=RecordOrigin.REMOTE)
                    for doc in documents
                ]
            except FALLBACK_ERRORS as e:
                logger.warning(f"Remote query failed, serving local records for {owner_id}: {e}")

        records = remote_records + local_records
        records.sort(key=_sort_key, reverse=True)
        return records[:limit]

    def list(self, owner_id: str, limit: int = 50) -> List[AnalysisRecord]:
        """Owner's records, newest first"""
        return self._query(owner_id, limit)

    def list_favorites(self, owner_id: str, limit: int = 50) -> List[AnalysisRecord]:
        return self._query(owner_id, limit, {"favorite": True})

    def search(self, owner_id: str, term: str) -> List[AnalysisRecord]:
        """Case-insensitive search over the owner's latest 100 records"""
        return [r for r in self._query(owner_id, SEARCH_WINDOW) if r.matches(term)]

    def get(self, record_id: str, owner_id: str) -> AnalysisRecord:
        """
        Fetch one of the owner's records

        Raises:
            RecordNotFound: Missing, or owned by someone else
        """
        if is_local_id(record_id):
            record = self.local.get_record(record_id)
        else:
            document = self._require_remote().get(self.collection, record_id)
            record = (
                AnalysisRecord.from_document(document, record_id, RecordOrigin.REMOTE)
                if document else None
            )

        if record is None or record.owner_id != owner_id:
            raise RecordNotFound(record_id)
        return record

    # ------------------------------------------------------------------
    # Mutate
    # ------------------------------------------------------------------

    def update(self, record_id: str, patch: RecordUpdate, owner_id: str) -> AnalysisRecord:
        """
        Change tags and/or favorite flag

        Raises:
            RecordNotFound: Missing, or owned by someone else
            PersistenceFailure: Remote store failed for a remote record
        """
        record = self.get(record_id, owner_id)
        changes = patch.model_dump(by_alias=True, exclude_none=True)
        if not changes:
            return record

        if is_local_id(record_id):
            self.local.update_record(record_id, changes)
        else:
            self._require_remote().update(self.collection, record_id, changes)

        logger.info(f"Updated record {record_id}: {sorted(changes)}")
        return record.model_copy(update=patch.model_dump(exclude_none=True))

    def delete(self, record_id: str, owner_id: str) -> None:
        """
        Delete one of the owner's records

        Raises:
            RecordNotFound: Missing, or owned by someone else
            PersistenceFailure: Remote store failed for a remote record
        """
        self.get(record_id, owner_id)

        if is_local_id(record_id):
            self.local.delete_record(record_id)
        else:
            self._require_remote().delete(self.collection, record_id)
            self.events.dispatch("sentiment_analysis_deleted", {"recordId": record_id})

        logger.info(f"Deleted record {record_id}")

    # ------------------------------------------------------------------
    # Reconciliation
    # ------------------------------------------------------------------

    def check_remote(self, owner_id: str) -> bool:
        """No-op write + delete against the remote store"""
        if self.remote is None:
            return False
        try:
            check_id = self.remote.add(self.collection, {
                "ownerId": owner_id,
                "reachabilityCheck": True,
                "createdAt": _now().isoformat(),
            })
            self.remote.delete(self.collection, check_id)
            return True
        except PersistenceFailure as e:
            logger.info(f"Remote store still unreachable: {e}")
            return False

    def restore(self, owner_id: str) -> RestoreReport:
        """
        Move the owner's local records to the remote store

        Each record is removed locally right after the remote store accepts
        it, so a repeated run never resubmits it. Per-record failures, remote
        or local, are logged, counted as failed, and the run continues.
        """
        pending = self.local.list_records(owner_id)
        if not pending:
            return RestoreReport(remote_reachable=self.remote is not None, remaining=0)

        if not self.check_remote(owner_id):
            return RestoreReport(remote_reachable=False, remaining=len(pending))

        synced = failed = 0
        for record in pending:
            resubmitted = record.model_copy(update={
                "id": None,
                "origin": RecordOrigin.REMOTE,
                "created_at": _now(),
            })
            try:
                new_id = self.remote.add(self.collection, resubmitted.to_document())
            except PersistenceFailure as e:
                failed += 1
                logger.error(f"Failed to sync local record {record.id}: {e}")
                continue

            try:
                self.local.delete_record(record.id)
            except PersistenceFailure as e:
                failed += 1
                logger.error(
                    f"Local record {record.id} synced as {new_id} but could not be "
                    f"removed locally: {e}"
                )
                continue

            synced += 1
            logger.info(f"Synced local record {record.id} -> {new_id}")

        remaining = self.local.pending_count(owner_id)
        logger.info(
            f"Restore for {owner_id}: synced={synced}, failed={failed}, remaining={remaining}"
        )
        return RestoreReport(remote_reachable=True, synced=synced, failed=failed, remaining=remaining)

    def pending_sync_count(self, owner_id: Optional[str] = None) -> int:
        return self.local.pending_count(owner_id)
