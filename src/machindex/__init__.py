"""machindex: shared machine index with cross-process locking."""

from .core import MachineIndex
from .errors import (
    CorruptRegistry,
    InvalidConfig,
    LockAcquisitionFailed,
    MachineIndexError,
    RecordLocked,
    UnlockedWrite,
)
from .models import Record

__version__ = "0.1.0"

__all__ = [
    "CorruptRegistry",
    "InvalidConfig",
    "LockAcquisitionFailed",
    "MachineIndex",
    "MachineIndexError",
    "Record",
    "RecordLocked",
    "UnlockedWrite",
    "__version__",
]
