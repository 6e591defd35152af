"""Pydantic data models for the machine index.

Example:
    >>> from machindex.models import Record
    >>> record = Record(name="web", provider="docker")
    >>> record.to_struct(updated_at="2014-03-02 11:11:44 +0100")
"""

from .record import Record

__all__ = ["Record"]
