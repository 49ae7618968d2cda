from __future__ import annotations

import json
from pathlib import Path

import pytest

from finledger.adapters.banking import load_banking_config
from finledger.errors import ConfigMissing


def test_load_banking_config_reads_entries(tmp_path: Path) -> None:
    # input
    path = tmp_path / "banking.config.json"
    path.write_text(
        json.dumps({"dkb": {"cookie": "session=abc", "xsrfToken": "tok"}}),
        encoding="utf-8",
    )

    # act
    config = load_banking_config(path)
    credentials = config.credentials_for("dkb")

    # assert
    assert credentials.cookie == "session=abc"
    assert credentials.xsrf_token == "tok"


def test_credentials_for_unknown_institution_raises(tmp_path: Path) -> None:
    path = tmp_path / "banking.config.json"
    path.write_text(json.dumps({"dkb": {"cookie": "c"}}), encoding="utf-8")

    with pytest.raises(ConfigMissing) as exc_info:
        load_banking_config(path).credentials_for("deutscheBank")
    assert exc_info.value.institution_id == "deutscheBank"


@pytest.mark.parametrize("content", [None, "{broken", '{"dkb": {"xsrfToken": "t"}}'])
def test_missing_or_invalid_file_raises_config_missing(
    tmp_path: Path, content: str | None
) -> None:
    # input
    path = tmp_path / "banking.config.json"
    if content is not None:
        path.write_text(content, encoding="utf-8")

    # act / assert
    with pytest.raises(ConfigMissing):
        load_banking_config(path)
