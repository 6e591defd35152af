"""Machine index: a shared registry of machines backed by one JSON file.

Any number of processes may open the same data directory. Consistency
comes from two layers of file locks (see ``lock_manager``):

- every read or write of the index file happens under the blocking
  index lock, and every write reloads the file first and replaces only
  the entry being written, so writers of different machines never
  discard each other's updates
- a machine must be checked out (its record lock held) before it can
  be written; ``get`` checks out, ``release`` gives it back, and ``set``
  of a new machine checks out the freshly minted id
"""

import json
import logging
import os
import threading
import uuid
from datetime import datetime
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from ..config import IndexConfig
from ..constants import INDEX_FILE, INDEX_VERSION, UPDATED_AT_FORMAT
from ..errors import CorruptRegistry, LockAcquisitionFailed, RecordLocked, UnlockedWrite
from ..models import Record
from .lock_manager import LockHandle, index_lock, record_lock_path, try_lock

logger = logging.getLogger(__name__)


def stamp_now() -> str:
    """Current local time in the updated_at stamp format."""
    return datetime.now().astimezone().strftime(UPDATED_AT_FORMAT)


class MachineIndex:
    """Registry of machines stored in <data_dir>/index.

    Args:
        data_dir: Existing, writable directory holding the index and
            its lock files
        config: Index file formatting; defaults to compact JSON. Callers
            that honor <data_dir>/config.toml pass its ``index`` section

    Raises:
        CorruptRegistry: If the index file exists but is unusable
    """

    def __init__(self, data_dir: Path, config: IndexConfig | None = None) -> None:
        self.data_dir = Path(data_dir)
        self.index_file = self.data_dir / INDEX_FILE
        self.config = config if config is not None else IndexConfig()

        # Guards _document, _machines and _machine_locks between threads
        self._lock = threading.Lock()
        self._document: dict[str, Any] = {}
        self._machines: dict[str, dict[str, Any]] = {}
        self._machine_locks: dict[str, LockHandle] = {}

        with index_lock(self.index_file):
            self._unlocked_reload()

    def __repr__(self) -> str:
        return f"MachineIndex({str(self.data_dir)!r})"

    def __contains__(self, record_id: object) -> bool:
        with self._lock, index_lock(self.index_file):
            self._unlocked_reload()
            return record_id in self._machines

    def __enter__(self) -> "MachineIndex":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def get(self, record_id: str) -> Record | None:
        """Check out a machine by id.

        The returned record stays locked against this and every other
        process until it is passed to ``release``. Only a checked out
        record can be updated with ``set``.

        Args:
            record_id: Id of the machine

        Returns:
            The locked record, or None if no machine has that id

        Raises:
            RecordLocked: If the machine is already checked out
            CorruptRegistry: If the index file is unusable
        """
        with self._lock, index_lock(self.index_file):
            self._unlocked_reload()
            raw = self._machines.get(record_id)
            if raw is None:
                return None

            record = self._build_record(record_id, raw)
            handle = try_lock(record_lock_path(self.data_dir, record_id))
            if handle is None:
                raise RecordLocked(record.name, record.provider)

            self._machine_locks[record_id] = handle

        logger.debug(f"Checked out machine {record_id}")
        return record

    def release(self, record: Record) -> None:
        """Give back a checked out machine.

        Idempotent: releasing a record that isn't locked does nothing.
        The record must not be passed to ``set`` afterwards.
        """
        with self._lock:
            handle = self._machine_locks.pop(record.id, None) if record.id else None
            if handle is not None:
                handle.release()
                logger.debug(f"Released machine {record.id}")

    def set(self, record: Record) -> Record:
        """Create or update a machine and return what was persisted.

        A record without an id is new: it gets a fresh id and comes back
        checked out, so the caller must ``release`` it to let others
        access it. A record with an id must be checked out by this index.

        Raises:
            LockAcquisitionFailed: If the lock of a new id cannot be taken
            UnlockedWrite: If the record is not checked out by this index
            CorruptRegistry: If the index file is unusable
        """
        struct = record.to_struct(updated_at=stamp_now())
        record_id = record.id

        with self._lock:
            minted = record_id is None
            if record_id is None:
                record_id = str(uuid.uuid4())
                try:
                    handle = try_lock(record_lock_path(self.data_dir, record_id))
                except OSError as e:
                    raise LockAcquisitionFailed(record.name) from e
                if handle is None:
                    raise LockAcquisitionFailed(record.name)

                self._machine_locks[record_id] = handle
                logger.debug(f"Assigned id {record_id} to new machine {record.name}")

            if record_id not in self._machine_locks:
                raise UnlockedWrite(record_id)

            try:
                with index_lock(self.index_file):
                    # Reload so only this machine's entry is replaced and
                    # entries written by other processes are kept
                    self._unlocked_reload()
                    self._machines[record_id] = struct
                    self._unlocked_save()
            except Exception:
                if minted:
                    self._machine_locks.pop(record_id).release()
                raise

        return Record.from_struct(record_id, struct)

    def records(self) -> list[Record]:
        """Snapshot of every machine, sorted by id.

        No record locks are taken: the returned records are for reading
        and cannot be passed to ``set`` unless checked out separately.
        """
        with self._lock, index_lock(self.index_file):
            self._unlocked_reload()
            return [
                self._build_record(record_id, raw)
                for record_id, raw in sorted(self._machines.items())
            ]

    def locked(self, record_id: str) -> bool:
        """Return True if this index has the machine checked out."""
        with self._lock:
            return record_id in self._machine_locks

    def close(self) -> None:
        """Release every machine this index still has checked out."""
        with self._lock:
            handles = list(self._machine_locks.values())
            self._machine_locks.clear()
        for handle in handles:
            handle.release()

    def _build_record(self, record_id: str, raw: dict[str, Any]) -> Record:
        try:
            return Record.from_struct(record_id, raw)
        except ValidationError as e:
            raise CorruptRegistry(self.index_file) from e

    def _unlocked_reload(self) -> None:
        """Reload the index from disk. Caller must hold the index lock."""
        if not self.index_file.is_file():
            self._document = {}
            self._machines = {}
            return

        try:
            content = self.index_file.read_text(encoding="utf-8")
            data = json.loads(content) if content.strip() else None
        except ValueError as e:
            raise CorruptRegistry(self.index_file) from e

        if data is None:
            self._document = {}
            self._machines = {}
            return

        if not isinstance(data, dict):
            raise CorruptRegistry(self.index_file)

        version = data.get("version")
        if type(version) is not int or version != INDEX_VERSION:
            raise CorruptRegistry(self.index_file)

        machines = data.get("machines")
        if machines is None:
            machines = {}
        elif not isinstance(machines, dict) or not all(
            isinstance(raw, dict) for raw in machines.values()
        ):
            raise CorruptRegistry(self.index_file)

        self._document = data
        self._machines = machines
        logger.debug(f"Loaded {len(machines)} machine(s) from {self.index_file}")

    def _unlocked_save(self) -> None:
        """Atomically write the index to disk. Caller must hold the index lock."""
        extra = {k: v for k, v in self._document.items() if k not in ("version", "machines")}
        document = {"version": INDEX_VERSION, "machines": self._machines, **extra}
        content = json.dumps(
            document, indent=self.config.indent, sort_keys=self.config.sort_keys
        )

        tmp = self.index_file.with_name(f"{self.index_file.name}.tmp")
        with tmp.open("w", encoding="utf-8") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp, self.index_file)
        logger.debug(f"Saved {len(self._machines)} machine(s) to {self.index_file}")
