"""Record model for entries in the machine index.

A record describes one tracked machine. Records read from the index
carry the id they are stored under; records built by callers have no
id until the index assigns one on the first write.
"""

from typing import Any, Self

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr


class Record(BaseModel):
    """A machine entry in the index.

    Unknown keys found on disk (such as ``data_path``) are kept as extra
    fields and written back unchanged.

    Attributes:
        name: Display name of the machine.
        provider: Backend that manages the machine.
        state: Last known lifecycle state.
        vagrantfile_path: Path to the Vagrantfile that manages the machine.
    """

    model_config = ConfigDict(extra="allow", validate_assignment=True)

    name: str | None = Field(default=None, description="Machine name")
    provider: str | None = Field(default=None, description="Provider name")
    state: str | None = Field(default=None, description="Last known state")
    vagrantfile_path: str | None = Field(
        default=None, description="Path to the managing Vagrantfile, kept as written"
    )

    _id: str | None = PrivateAttr(default=None)
    _updated_at: str | None = PrivateAttr(default=None)

    @property
    def id(self) -> str | None:
        """Index id of this record, or None if it was never persisted."""
        return self._id

    @property
    def updated_at(self) -> str | None:
        """Stamp of the last persist. Opaque, never parsed."""
        return self._updated_at

    @classmethod
    def from_struct(cls, record_id: str, raw: dict[str, Any]) -> Self:
        """Build a record from its persisted shape.

        Args:
            record_id: Key the record is stored under
            raw: Persisted record body

        Returns:
            Record carrying the id and updated_at stamp
        """
        body = {k: v for k, v in raw.items() if k not in ("id", "updated_at")}
        record = cls.model_validate(body)
        record._id = record_id
        record._updated_at = raw.get("updated_at")
        return record

    def to_struct(self, updated_at: str | None = None) -> dict[str, Any]:
        """Convert to the persisted shape.

        Args:
            updated_at: Stamp to write; keeps the current stamp if None

        Returns:
            JSON-compatible dict without the id
        """
        struct = self.model_dump(mode="json")
        struct["updated_at"] = self._updated_at if updated_at is None else updated_at
        return struct
