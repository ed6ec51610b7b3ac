"""
Local Record Store

Key-value fallback storage for analysis records the remote store could not
accept. Records wait here until a restore run moves them to the remote store.

Storage Structure (single JSON file, written through on every mutation):
    {
        "sentiment_local_1718000000000_k3j9x2a1b": { ...record document, "id": ... },
        "sentiment_index_<ownerId>": ["local_1718000000000_k3j9x2a1b", ...]
    }

Ids carry a `local_` prefix; that prefix is how stored records are told
apart from remote ones.
"""

import copy
import json
import logging
import threading
import time
import uuid
from pathlib import Path
from typing import Any, Dict, List, Optional

from sentiment_service.exceptions import PersistenceFailure
from sentiment_service.models.schemas import AnalysisRecord, RecordOrigin

logger = logging.getLogger(__name__)


LOCAL_ID_PREFIX = "local_"
RECORD_KEY_PREFIX = "sentiment_"
INDEX_KEY_PREFIX = "sentiment_index_"


def is_local_id(record_id: Optional[str]) -> bool:
    return bool(record_id) and record_id.startswith(LOCAL_ID_PREFIX)


def origin_of(record_id: Optional[str]) -> RecordOrigin:
    return RecordOrigin.LOCAL if is_local_id(record_id) else RecordOrigin.REMOTE


class LocalRecordStore:
    """
    Thread-safe JSON-backed store for local-origin records

    Example:
        >>> store = LocalRecordStore(Path("data/local_store"))
        >>> record_id = store.generate_id()
        >>> store.save_record(record.model_copy(update={"id": record_id}))
        >>> store.list_records("user-1")
    """

    def __init__(self, storage_path: Optional[Path] = None, filename: str = "local_records.json"):
        """
        Initialize local store.

        Args:
            storage_path: Directory holding the JSON file
                          (defaults to data/local_store/)
            filename: Name of the JSON file
        """
        self.storage_path = Path(storage_path or "data/local_store")
        self.storage_path.mkdir(parents=True, exist_ok=True)
        self.filepath = self.storage_path / filename

        self._data: Dict[str, Any] = {}
        self._lock = threading.RLock()

        self._load()
        logger.info(
            f"Initialized LocalRecordStore at {self.filepath} "
            f"({self.pending_count()} pending records)"
        )

    # ------------------------------------------------------------------
    # Keys
    # ------------------------------------------------------------------

    @staticmethod
    def generate_id() -> str:
        """`local_<epoch millis>_<random>`"""
        return f"{LOCAL_ID_PREFIX}{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}"

    @staticmethod
    def record_key(record_id: str) -> str:
        return f"{RECORD_KEY_PREFIX}{record_id}"

    @staticmethod
    def index_key(owner_id: str) -> str:
        return f"{INDEX_KEY_PREFIX}{owner_id}"

    # ------------------------------------------------------------------
    # File I/O
    # ------------------------------------------------------------------

    def _load(self) -> None:
        if not self.filepath.exists():
            return
        try:
            with open(self.filepath, 'r', encoding='utf-8') as f:
                self._data = json.load(f)
        except (OSError, ValueError) as e:
            logger.error(f"Failed to load local store {self.filepath}: {e}")
            raise PersistenceFailure("Local storage unreadable", details=str(e)) from e

    def _flush(self, data: Dict[str, Any]) -> None:
        tmp_path = self.filepath.with_suffix(".tmp")
        try:
            with open(tmp_path, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            tmp_path.replace(self.filepath)
        except OSError as e:
            logger.error(f"Failed to write local store {self.filepath}: {e}")
            raise PersistenceFailure("Local storage failed", details=str(e)) from e

    def _staged(self) -> Dict[str, Any]:
        """Copy of the current state to mutate before committing"""
        return copy.deepcopy(self._data)

    def _commit(self, staged: Dict[str, Any]) -> None:
        """Write staged state to disk; memory only changes once the write succeeded"""
        self._flush(staged)
        self._data = staged

    # ------------------------------------------------------------------
    # Records
    # ------------------------------------------------------------------

    def save_record(self, record: AnalysisRecord) -> str:
        """
        Store a record under its local id and add it to its owner's index.

        Raises:
            ValueError: Record has no local id
            PersistenceFailure: File could not be written (nothing is stored)
        """
        if not is_local_id(record.id):
            raise ValueError(f"Local store only accepts local ids, got {record.id!r}")

        with self._lock:
            staged = self._staged()
            document = record.to_document()
            document["id"] = record.id
            staged[self.record_key(record.id)] = document

            index = staged.setdefault(self.index_key(record.owner_id), [])
            if record.id not in index:
                index.append(record.id)

            self._commit(staged)
            logger.info(f"Saved record {record.id} locally for owner {record.owner_id}")
            return record.id

    def get_record(self, record_id: str) -> Optional[AnalysisRecord]:
        with self._lock:
            document = self._data.get(self.record_key(record_id))
            if document is None:
                return None
            return AnalysisRecord.from_document(document, record_id, origin_of(record_id))

    def update_record(self, record_id: str, patch: Dict[str, Any]) -> Optional[AnalysisRecord]:
        """
        Merge camelCase fields into a stored record.

        Returns:
            The updated record, or None when it doesn't exist

        Raises:
            PersistenceFailure: File could not be written (record unchanged)
        """
        with self._lock:
            key = self.record_key(record_id)
            if key not in self._data:
                return None
            staged = self._staged()
            staged[key].update(patch)
            self._commit(staged)
            return self.get_record(record_id)

    def delete_record(self, record_id: str) -> bool:
        """
        Remove a record and drop it from its owner's index.

        Returns:
            bool: True if removed, False if not found

        Raises:
            PersistenceFailure: File could not be written (record kept)
        """
        with self._lock:
            staged = self._staged()
            document = staged.pop(self.record_key(record_id), None)
            if document is None:
                logger.warning(f"Local record {record_id} not found for removal")
                return False

            owner_id = document.get("ownerId")
            index = staged.get(self.index_key(owner_id), [])
            if record_id in index:
                index.remove(record_id)
            if not index:
                staged.pop(self.index_key(owner_id), None)

            self._commit(staged)
            logger.debug(f"Removed local record {record_id}")
            return True

    def list_records(self, owner_id: str) -> List[AnalysisRecord]:
        """All local records of an owner, in index order"""
        with self._lock:
            records = []
            for record_id in self._data.get(self.index_key(owner_id), []):
                record = self.get_record(record_id)
                if record is not None:
                    records.append(record)
            return records

    def owner_ids(self) -> List[str]:
        with self._lock:
            return [
                key[len(INDEX_KEY_PREFIX):]
                for key in self._data
                if key.startswith(INDEX_KEY_PREFIX)
            ]

    def pending_count(self, owner_id: Optional[str] = None) -> int:
        """Number of records waiting to be synced (for one owner or all)"""
        with self._lock:
            if owner_id is not None:
                return len(self._data.get(self.index_key(owner_id), []))
            return sum(
                len(ids) for key, ids in self._data.items()
                if key.startswith(INDEX_KEY_PREFIX)
            )
