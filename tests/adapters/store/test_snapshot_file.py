from __future__ import annotations

from pathlib import Path

import pytest

from finledger.adapters.store import snapshot_file
from finledger.adapters.store.snapshot_file import SnapshotFile, read_json_file
from finledger.errors import StoreCorruptionError
from finledger.models.ledger import LedgerSnapshot, User
from tests.fixtures.ledger_records import create_account, create_transaction


def provoke_atomic_write_failure(path: Path, payload: str) -> None:
    try:
        with snapshot_file._atomic_writer(path) as tmp_file:  # noqa: SLF001 (intentional private use)
            tmp_file.write(payload)
            raise RuntimeError("boom")
    except RuntimeError:
        pass


def test_read_missing_file_returns_none(tmp_path: Path) -> None:
    snapshot = SnapshotFile(tmp_path / "db.json").read()

    assert snapshot is None


def test_write_then_read_preserves_records(tmp_path: Path) -> None:
    # input
    original = LedgerSnapshot(
        user=User(id="u1", name="Alex"),
        bank_accounts=[create_account()],
        transactions=[create_transaction()],
    )
    file = SnapshotFile(tmp_path / "nested" / "db.json")

    # act
    file.write(original)
    loaded = file.read()

    # assert
    assert loaded == original
    assert file.exists() is True


@pytest.mark.parametrize(
    "content",
    ["", "{not json", "[1, 2, 3]", '{"transactions": "oops"}'],
)
def test_unparseable_file_raises_corruption(tmp_path: Path, content: str) -> None:
    # input
    path = tmp_path / "db.json"
    path.write_text(content, encoding="utf-8")

    # act / assert
    with pytest.raises(StoreCorruptionError) as exc_info:
        SnapshotFile(path).read()
    assert exc_info.value.path == path.resolve()


def test_invalid_utf8_raises_corruption(tmp_path: Path) -> None:
    path = tmp_path / "db.json"
    path.write_bytes(b"\xff\xfe\x00garbage")

    with pytest.raises(StoreCorruptionError):
        read_json_file(path)


def test_atomic_writer_cleans_temp_on_exception(tmp_path: Path) -> None:
    # input
    target = tmp_path / "db.json"

    # act
    provoke_atomic_write_failure(target, payload="partial")

    # assert
    assert list(tmp_path.glob(".tmp*")) == []
    assert target.exists() is False


def test_atomic_write_keeps_previous_content_on_failure(tmp_path: Path) -> None:
    # input
    target = tmp_path / "db.json"
    snapshot_file.atomic_write_text(target, '{"version": 1}')

    # act
    provoke_atomic_write_failure(target, payload="half written")

    # assert
    assert target.read_text(encoding="utf-8") == '{"version": 1}'
