from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
import json
import os
from pathlib import Path
import tempfile
from typing import Any, TextIO

from pydantic import ValidationError as PydanticValidationError

from finledger.errors import StoreCorruptionError
from finledger.models.ledger import LedgerSnapshot

__all__ = ["SnapshotFile", "atomic_write_text", "read_json_file"]


class SnapshotFile:
    """
    One mode's full ledger snapshot serialized as JSON on disk.

    - A missing file reads as ``None``; the caller treats it as an empty store.
    - An unparseable file raises StoreCorruptionError; nothing is repaired.
    - Writes are atomic via write-to-temp + os.replace() in the same directory.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path).expanduser().resolve()

    def exists(self) -> bool:
        return self.path.exists()

    def read(self) -> LedgerSnapshot | None:
        try:
            data = read_json_file(self.path)
        except FileNotFoundError:
            return None
        try:
            return LedgerSnapshot.parse(data)
        except PydanticValidationError as exc:
            raise StoreCorruptionError(
                self.path, f"unexpected document shape: {exc.error_count()} error(s)"
            ) from exc

    def write(self, snapshot: LedgerSnapshot) -> None:
        serialized = snapshot.model_dump_json(indent=2)
        atomic_write_text(self.path, serialized)


def read_json_file(path: Path) -> Any:
    """Parse a JSON file; FileNotFoundError propagates to the caller."""
    try:
        with path.open("r", encoding="utf-8") as f:
            text = f.read()
    except UnicodeDecodeError as exc:
        raise StoreCorruptionError(path, "not valid UTF-8") from exc
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise StoreCorruptionError(path, f"invalid JSON ({exc.msg})") from exc


def atomic_write_text(path: Path, text: str) -> None:
    with _atomic_writer(path) as tmp_file:
        tmp_file.write(text)


@contextmanager
def _atomic_writer(final_path: Path) -> Iterator[TextIO]:
    directory = final_path.parent
    directory.mkdir(parents=True, exist_ok=True)
    tmp_file = tempfile.NamedTemporaryFile(
        mode="w",
        encoding="utf-8",
        delete=False,
        dir=str(directory),
        prefix=".tmp",
    )
    try:
        try:
            yield tmp_file
            tmp_file.flush()
            os.fsync(tmp_file.fileno())
        finally:
            tmp_file.close()

        os.replace(tmp_file.name, final_path)
    except BaseException:
        # Best-effort cleanup of temp file
        try:
            if os.path.exists(tmp_file.name):
                os.unlink(tmp_file.name)
        except OSError:
            pass
        raise
