from enum import Enum
from typing import FrozenSet


class OperationType(Enum):
    """Classifies a statement for query tracking and write events."""

    SELECT = "select"
    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"
    TRUNCATE = "truncate"
    DROP = "drop"
    TRANSACTION = "transaction"

    @classmethod
    def write_types(cls) -> FrozenSet["OperationType"]:
        return frozenset({cls.INSERT, cls.UPDATE, cls.DELETE, cls.TRUNCATE, cls.DROP})

    @property
    def is_write(self) -> bool:
        # TRANSACTION statements are tracked, but do not trigger write events
        return self in OperationType.write_types()

    @property
    def is_select(self) -> bool:
        return self is OperationType.SELECT
