from typing import Any, Dict, List, MutableMapping, Optional, Protocol

from mcpdesk.models.server import ServerIdentity
from mcpdesk.settings import DEFAULT_STORAGE_KEY


class IConfigStore(Protocol):
    """
    Persistence of server definitions. Name uniqueness is enforced by the caller.
    """
    def list(self) -> List[ServerIdentity]:
        ...

    def get(self, name: str) -> Optional[ServerIdentity]:
        ...

    def upsert(self, identity: ServerIdentity) -> None:
        ...

    def remove(self, name: str) -> None:
        ...


class ConfigStore:
    """
    Keeps server definitions as a list of plain dicts under `storage_key` in a
    host key/value store (any MutableMapping, a dict by default).
    """
    def __init__(self, backend: Optional[MutableMapping[str, Any]] = None,
                 storage_key: str = DEFAULT_STORAGE_KEY):
        self.backend: MutableMapping[str, Any] = {} if backend is None else backend
        self.storage_key = storage_key

    def _records(self) -> List[Dict[str, Any]]:
        return list(self.backend.get(self.storage_key) or [])

    def _save(self, records: List[Dict[str, Any]]) -> None:
        self.backend[self.storage_key] = records

    def list(self) -> List[ServerIdentity]:
        return [ServerIdentity.from_dict(r) for r in self._records()]

    def get(self, name: str) -> Optional[ServerIdentity]:
        record = next((r for r in self._records() if r.get("name") == name), None)
        return ServerIdentity.from_dict(record) if record is not None else None

    def exists(self, name: str) -> bool:
        return any(r.get("name") == name for r in self._records())

    def upsert(self, identity: ServerIdentity) -> None:
        """Replace the record with the same name in place, or append a new one."""
        records = self._records()
        data = identity.to_dict()
        for i, record in enumerate(records):
            if record.get("name") == identity.name:
                records[i] = data
                break
        else:
            records.append(data)
        self._save(records)

    def remove(self, name: str) -> None:
        self._save([r for r in self._records() if r.get("name") != name])
