"""Banking session credentials keyed by institution id."""

from __future__ import annotations

import json
from pathlib import Path

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from finledger.errors import ConfigMissing


class BankCredentials(BaseModel):
    """Opaque session tokens for one institution, passed through untouched."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    cookie: str
    xsrf_token: str | None = Field(default=None, alias="xsrfToken")


class BankingConfig(BaseModel):
    """Contents of ``banking.config.json``: ``{"<institution>": {...}}``."""

    institutions: dict[str, BankCredentials] = Field(default_factory=dict)

    def credentials_for(self, institution_id: str) -> BankCredentials:
        """
        Raises:
            ConfigMissing: If the institution has no entry.
        """
        credentials = self.institutions.get(institution_id)
        if credentials is None:
            raise ConfigMissing(institution_id)
        return credentials


def load_banking_config(path: Path) -> BankingConfig:
    """Load and validate the credentials file.

    Raises:
        ConfigMissing: If the file is absent or invalid. The institution id
            on the error is ``"*"`` since no institution could be resolved.
    """
    if not path.exists():
        raise ConfigMissing("*", f"No banking config found at {path}")

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return BankingConfig(institutions=data)
    except (json.JSONDecodeError, PydanticValidationError) as exc:
        logger.bind(path=str(path)).error("Invalid banking config {}: {}", path, exc)
        raise ConfigMissing("*", f"Invalid banking config at {path}") from exc
