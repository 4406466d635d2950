from typing import Any, Literal, Mapping, Protocol

Direction = Literal["asc", "desc"]


class RecordStore(Protocol):
    """Document store consumed by the ledger and the page lookups.

    Every operation touches a single named collection. Writes are
    conditional on a single record, so no cross-record transaction is needed.
    """

    def get(self, collection: str, key: str) -> dict | None:
        ...

    def put(self, collection: str, key: str, value: Mapping[str, Any]) -> bool:
        """Create ``key``; returns False without writing if it already exists."""
        ...

    def update_if_exists(
        self,
        collection: str,
        key: str,
        patch: Mapping[str, Any],
        only_if: Mapping[str, Any] | None = None,
    ) -> dict | None:
        """Apply ``patch`` when the record exists and matches ``only_if``.

        Returns the updated record, or None when the guard did not hold.
        """
        ...

    def query_by_equals(
        self,
        collection: str,
        field: str,
        value: Any,
        limit: int,
        order_by: str | None = None,
        direction: Direction = "desc",
        filters: Mapping[str, Any] | None = None,
    ) -> list[dict]:
        ...
