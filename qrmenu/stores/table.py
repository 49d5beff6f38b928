"""Table number remembered for the visitor, usually taken from the QR link."""

from typing import Any, Optional


class TableStore:

    def __init__(self, table_number: str = ""):
        self.table_number = table_number

    def set_table_number(self, table: str) -> None:
        self.table_number = table

    def clear_table(self) -> None:
        self.table_number = ""

    def populate_from_link(self, table: Optional[str]) -> bool:
        """
        Fill the table number from an inbound ?table= link parameter.

        Only applies while the store is empty; a remembered table is
        kept until it is cleared explicitly. Returns True when the value
        was taken.
        """
        if not table or self.table_number:
            return False
        self.table_number = table
        return True

    def to_snapshot(self) -> dict[str, Any]:
        return {"table_number": self.table_number}

    @classmethod
    def from_snapshot(cls, data: Optional[dict[str, Any]]) -> "TableStore":
        if not data:
            return cls()
        return cls(table_number=str(data.get("table_number") or ""))
