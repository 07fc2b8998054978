"""
Local credential storage.

A store saves, loads and deletes small JSON records keyed by a fixed
service name and an account. A missing record is a normal outcome
(``load`` returns None); only I/O failures raise CredentialStoreError.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Protocol

from voicecommit.exceptions import CredentialStoreError

logger = logging.getLogger(__name__)

DEFAULT_SERVICE = "voicecommit"


class CredentialStore(Protocol):
    def save(self, account: str, data: dict[str, Any]) -> None: ...

    def load(self, account: str) -> dict[str, Any] | None: ...

    def delete(self, account: str) -> None: ...


class MemoryCredentialStore:
    """Process-local store."""

    def __init__(self, service: str = DEFAULT_SERVICE) -> None:
        self.service = service
        self._records: dict[str, dict[str, Any]] = {}

    def save(self, account: str, data: dict[str, Any]) -> None:
        self._records[account] = dict(data)

    def load(self, account: str) -> dict[str, Any] | None:
        record = self._records.get(account)
        return dict(record) if record is not None else None

    def delete(self, account: str) -> None:
        self._records.pop(account, None)


class FileCredentialStore:
    """
    JSON file store shared by every process that points at the same path.

    The file holds ``{service: {account: record}}`` and is written with
    owner-only permissions.

    Args:
        path: Location of the JSON file (created on first save)
        service: Service name records are grouped under
    """

    def __init__(self, path: str | Path, service: str = DEFAULT_SERVICE) -> None:
        self.path = Path(path).expanduser()
        self.service = service

    def save(self, account: str, data: dict[str, Any]) -> None:
        document = self._read()
        document.setdefault(self.service, {})[account] = data
        self._write(document)

    def load(self, account: str) -> dict[str, Any] | None:
        record = self._read().get(self.service, {}).get(account)
        return record if isinstance(record, dict) else None

    def delete(self, account: str) -> None:
        document = self._read()
        records = document.get(self.service, {})
        if account not in records:
            return
        del records[account]
        self._write(document)

    def _read(self) -> dict[str, Any]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as e:
            raise CredentialStoreError(f"Cannot read {self.path}: {e}") from e

        try:
            document = json.loads(raw) if raw.strip() else {}
        except json.JSONDecodeError as e:
            raise CredentialStoreError(f"Corrupt credential file {self.path}: {e}") from e
        if not isinstance(document, dict):
            raise CredentialStoreError(f"Corrupt credential file {self.path}")
        return document

    def _write(self, document: dict[str, Any]) -> None:
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd = os.open(tmp_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(document, f, indent=2)
            os.replace(tmp_path, self.path)
        except OSError as e:
            raise CredentialStoreError(f"Cannot write {self.path}: {e}") from e
        logger.debug("Credential file %s updated", self.path)
