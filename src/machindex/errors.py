"""Machine index errors."""

from pathlib import Path


class MachineIndexError(Exception):
    """Base exception for machine index errors."""


class CorruptRegistry(MachineIndexError):
    """Raised when the index file cannot be parsed or has an unknown version."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        super().__init__(
            f"The machine index at {self.path} is corrupt. "
            "Inspect or repair the file manually before trying again."
        )


class RecordLocked(MachineIndexError):
    """Raised when a machine is already checked out by another holder."""

    def __init__(self, name: str | None, provider: str | None) -> None:
        self.name = name
        self.provider = provider
        super().__init__(
            f"Machine '{name}' ({provider}) is locked: "
            "another process or command is using this machine"
        )


class LockAcquisitionFailed(MachineIndexError):
    """Raised when a freshly minted record cannot be locked."""

    def __init__(self, name: str | None) -> None:
        self.name = name
        super().__init__(f"Failed to lock new machine: {name}")


class UnlockedWrite(MachineIndexError):
    """Raised when persisting a record this store has not checked out."""

    def __init__(self, record_id: str) -> None:
        self.record_id = record_id
        super().__init__(f"Unlocked write on machine: {record_id}")


class InvalidConfig(MachineIndexError):
    """Raised when config.toml cannot be parsed or holds invalid values."""

    def __init__(self, path: Path | str, reason: str) -> None:
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Invalid config at {self.path}: {reason}")
