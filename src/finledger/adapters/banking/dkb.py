from __future__ import annotations

from collections.abc import Callable
from datetime import date
from decimal import Decimal
import json
from typing import Any, Literal, Self, cast
import urllib.error
import urllib.parse
import urllib.request

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from finledger.adapters.banking.credentials import BankCredentials
from finledger.core.calendar import to_canonical_date
from finledger.errors import AdapterError
from finledger.models.ledger import Balances, BankAccount, CanonicalFields

DKB_BASE_URL = "https://banking.dkb.de/api"
ACCOUNT_ID_PREFIX = "dkb_"
PAGE_SIZE = 25
MAX_PAGES = 1000

Opener = Callable[[urllib.request.Request], Any]


class DkbBaseModel(BaseModel):
    """Shared base for DKB response models (camelCase on the wire)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @classmethod
    def parse(cls, data: Any) -> Self:
        return cls.model_validate(data)


class DkbAmount(DkbBaseModel):
    currency_code: str
    value: Decimal


class DkbProduct(DkbBaseModel):
    id: str
    type: str
    display_name: str


class DkbAccountAttributes(DkbBaseModel):
    holder_name: str | None = None
    iban: str | None = None
    currency_code: str = "EUR"
    balance: DkbAmount
    available_balance: DkbAmount | None = None
    product: DkbProduct


class DkbAccount(DkbBaseModel):
    type: Literal["account"]
    id: str
    attributes: DkbAccountAttributes

    def to_bank_account(self) -> BankAccount:
        attrs = self.attributes
        available = (
            float(attrs.available_balance.value) if attrs.available_balance else None
        )
        return BankAccount(
            account_id=f"{ACCOUNT_ID_PREFIX}{self.id}",
            name=attrs.product.display_name,
            institution_id=DkbAdapter.institution_id,
            balances=Balances(
                current=float(attrs.balance.value),
                available=available,
                currency=attrs.balance.currency_code,
            ),
            iban=attrs.iban,
            account_type=attrs.product.type,
        )


class DkbAccountsResponse(DkbBaseModel):
    data: list[DkbAccount]


class DkbPartyAccount(DkbBaseModel):
    iban: str | None = None
    account_nr: str | None = None


class DkbParty(DkbBaseModel):
    name: str | None = None
    creditor_account: DkbPartyAccount | None = None
    debtor_account: DkbPartyAccount | None = None


class DkbTransactionAttributes(DkbBaseModel):
    status: str
    booking_date: date
    value_date: date | None = None
    description: str = ""
    end_to_end_id: str | None = None
    amount: DkbAmount
    creditor: DkbParty | None = None
    debtor: DkbParty | None = None


class DkbTransaction(DkbBaseModel):
    type: Literal["accountTransaction"]
    id: str
    attributes: DkbTransactionAttributes

    @property
    def is_booked(self) -> bool:
        return self.attributes.status == "booked"

    def to_fields(self, account_id: str) -> CanonicalFields:
        attrs = self.attributes
        amount = float(attrs.amount.value)
        party = attrs.creditor if amount < 0 else attrs.debtor
        return CanonicalFields(
            account_id=account_id,
            date=to_canonical_date(attrs.value_date or attrs.booking_date),
            amount=amount,
            description=attrs.description,
            counterparty=(party.name if party and party.name else ""),
            currency=attrs.amount.currency_code,
            raw_source=self.model_dump(mode="json", by_alias=True),
        )


class DkbPageMeta(DkbBaseModel):
    next: str | None = None


class DkbMeta(DkbBaseModel):
    page: DkbPageMeta | None = None


class DkbTransactionsResponse(DkbBaseModel):
    data: list[DkbTransaction] = Field(default_factory=list)
    meta: DkbMeta | None = None

    @property
    def next_cursor(self) -> str | None:
        if self.meta and self.meta.page:
            return self.meta.page.next
        return None


class DkbAdapter:
    """
    Bank adapter for the DKB web banking API.

    Uses the session cookie and XSRF token of a logged-in browser session.
    Loan accounts are excluded; transactions are paged with ``page[after]``
    cursors.
    """

    institution_id = "dkb"
    institution_name = "Deutsche Kreditbank (DKB)"

    def __init__(
        self,
        *,
        base_url: str = DKB_BASE_URL,
        opener: Opener = urllib.request.urlopen,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._opener = opener

    def fetch_accounts(self, credentials: BankCredentials) -> list[BankAccount]:
        query = urllib.parse.urlencode({"filter[product.type][NEQ]": "loan"})
        body = self._get(f"/accounts/accounts?{query}", credentials)
        try:
            resp = DkbAccountsResponse.parse(body)
            return [account.to_bank_account() for account in resp.data]
        except PydanticValidationError as e:
            raise AdapterError(
                self.institution_id, f"Unexpected accounts response shape: {e}", cause=e
            ) from e

    def fetch_transactions(
        self,
        credentials: BankCredentials,
        account_id: str,
        *,
        since: date | None = None,
    ) -> list[CanonicalFields]:
        remote_id = account_id.removeprefix(ACCOUNT_ID_PREFIX)
        fields: list[CanonicalFields] = []
        cursor: str | None = None

        for page in range(1, MAX_PAGES + 1):
            params = {"expand": "Merchant", "page[size]": str(PAGE_SIZE)}
            if cursor:
                params["page[after]"] = cursor
            path = (
                f"/accounts/accounts/{urllib.parse.quote(remote_id)}/transactions?"
                + urllib.parse.urlencode(params)
            )
            body = self._get(path, credentials)
            try:
                resp = DkbTransactionsResponse.parse(body)
                booked = [
                    txn.to_fields(account_id) for txn in resp.data if txn.is_booked
                ]
            except PydanticValidationError as e:
                raise AdapterError(
                    self.institution_id,
                    f"Unexpected transactions response shape (page {page}): {e}",
                    cause=e,
                ) from e

            fields.extend(f for f in booked if since is None or f.date >= since)

            cursor = resp.next_cursor
            if not cursor:
                return fields

        raise AdapterError(
            self.institution_id,
            f"Pagination limit exceeded ({MAX_PAGES} pages)",
        )

    def _get(self, path: str, credentials: BankCredentials) -> dict[str, Any]:
        headers = {
            "Cookie": credentials.cookie,
            "Accept": "application/json, text/plain, */*",
        }
        if credentials.xsrf_token:
            headers["x-xsrf-token"] = credentials.xsrf_token

        req = urllib.request.Request(  # noqa: S310
            self._base_url + path, headers=headers, method="GET"
        )
        try:
            with self._opener(req) as resp:
                body = resp.read().decode("utf-8")
        except urllib.error.HTTPError as e:
            if e.code in (401, 403):
                raise AdapterError(
                    self.institution_id,
                    f"Session rejected (HTTP {e.code}); refresh the DKB session "
                    "credentials",
                    cause=e,
                ) from e
            raise AdapterError(
                self.institution_id, f"DKB API error (HTTP {e.code})", cause=e
            ) from e
        except urllib.error.URLError as e:
            raise AdapterError(
                self.institution_id,
                f"Network error calling DKB API: {e.reason}",
                cause=e,
            ) from e

        try:
            return cast(dict[str, Any], json.loads(body))
        except json.JSONDecodeError as e:
            raise AdapterError(
                self.institution_id,
                f"Failed to parse DKB response as JSON: {e}",
                cause=e,
            ) from e
