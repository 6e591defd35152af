"""Core logic of the machine index.

- lock_manager: index and record file locks
- index: the MachineIndex registry store
"""

from .index import MachineIndex, stamp_now
from .lock_manager import LockHandle, index_lock, record_lock_path, try_lock

__all__ = [
    "LockHandle",
    "MachineIndex",
    "index_lock",
    "record_lock_path",
    "stamp_now",
    "try_lock",
]
