from dataclasses import dataclass, field

from sortedcontainers import SortedDict  # type: ignore

from ..core.model import ScanRow
from ..datastructures.type_aliases import RawKey, RawValue, RowLimit


@dataclass(slots=True)
class MetaStore:
    """Ordered in-memory keyspace shared by the nodes of a local cluster."""

    _entries: SortedDict = field(default_factory=SortedDict)

    def get(self, key: RawKey) -> RawValue | None:
        return self._entries.get(key)

    def put(self, key: RawKey, value: RawValue) -> None:
        self._entries[key] = value

    def scan(self, start: RawKey, end: RawKey, limit: RowLimit) -> list[ScanRow]:
        rows: list[ScanRow] = []
        for key in self._entries.irange(start, end, inclusive=(True, False)):
            if len(rows) >= limit:
                break
            rows.append(ScanRow(key=key, value=self._entries[key]))
        return rows

    def __len__(self) -> int:
        return len(self._entries)
