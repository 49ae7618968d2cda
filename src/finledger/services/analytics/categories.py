"""Keyword categorization of transactions.

Categories are derived on read and never stored: the first rule whose
keyword occurs in the case-folded description and counterparty wins.
"""

from __future__ import annotations

from collections.abc import Collection, Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from finledger.models.ledger import BankAccount, Transaction

OTHER = "Other"
TRANSFER = "Transfer"


@dataclass(frozen=True)
class CategoryRule:
    category: str
    keywords: tuple[str, ...]

    def matches(self, text: str) -> bool:
        return any(keyword in text for keyword in self.keywords)


# Order matters: "netflix abo" is Entertainment, not Subscriptions
CATEGORY_RULES: tuple[CategoryRule, ...] = (
    CategoryRule(
        "Groceries",
        (
            "rewe",
            "edeka",
            "aldi",
            "lidl",
            "netto",
            "penny",
            "kaufland",
            "dm-drogerie",
            "rossmann",
            "supermarkt",
            "lebensmittel",
        ),
    ),
    CategoryRule(
        "Rent & Housing",
        ("miete", "rent", "wohnung", "hausgeld", "nebenkosten", "immobilien"),
    ),
    CategoryRule(
        "Utilities",
        (
            "strom",
            "gas",
            "wasser",
            "stadtwerke",
            "vattenfall",
            "eon",
            "enpal",
            "telekom",
            "vodafone",
            "o2",
            "internet",
            "rundfunk",
            "gez",
        ),
    ),
    CategoryRule(
        "Transport",
        (
            "db ",
            "bahn",
            "bvg",
            "mvg",
            "tankstelle",
            "shell",
            "aral",
            "uber",
            "bolt",
            "tier",
            "lime",
            "flixbus",
            "car2go",
            "sixt",
        ),
    ),
    CategoryRule(
        "Dining & Restaurants",
        (
            "restaurant",
            "gastronomie",
            "lieferando",
            "delivery hero",
            "mcdonalds",
            "burger king",
            "starbucks",
            "cafe",
            "bistro",
            "pizza",
            "sushi",
        ),
    ),
    CategoryRule(
        "Entertainment",
        (
            "kino",
            "cinema",
            "theater",
            "spotify",
            "netflix",
            "disney",
            "amazon prime",
            "youtube",
            "gaming",
            "playstation",
            "steam",
        ),
    ),
    CategoryRule(
        "Shopping",
        (
            "amazon",
            "zalando",
            "h&m",
            "zara",
            "mediamarkt",
            "saturn",
            "ikea",
            "ebay",
            "otto",
            "about you",
        ),
    ),
    CategoryRule(
        "Health & Insurance",
        (
            "apotheke",
            "arzt",
            "krankenhaus",
            "versicherung",
            "insurance",
            "krankenkasse",
            "aok",
            "tk ",
            "barmer",
            "fitnessstudio",
            "gym",
        ),
    ),
    CategoryRule(
        "Subscriptions",
        (
            "abo",
            "subscription",
            "mitgliedschaft",
            "membership",
            "patreon",
            "cloud",
            "icloud",
            "google storage",
        ),
    ),
    CategoryRule(
        "Income",
        (
            "gehalt",
            "salary",
            "lohn",
            "wage",
            "einnahme",
            "gutschrift",
            "erstattung",
            "refund",
            "dividende",
        ),
    ),
    CategoryRule(
        TRANSFER,
        (
            "umbuchung",
            "transfer",
            "überweisung eigen",
            "sparplan",
            "dauerauftrag eigen",
        ),
    ),
    CategoryRule(
        "Cash",
        ("bargeld", "geldautomat", "atm", "cash", "abhebung", "withdrawal"),
    ),
)

CATEGORIES: tuple[str, ...] = (*(rule.category for rule in CATEGORY_RULES), OTHER)


def normalize_iban(iban: str) -> str:
    return "".join(iban.split()).upper()


def own_ibans(accounts: Iterable[BankAccount]) -> frozenset[str]:
    """IBANs of the ledger's own accounts, normalized for comparison."""
    return frozenset(normalize_iban(a.iban) for a in accounts if a.iban)


def _party_iban(raw_source: Mapping[str, Any], party: str) -> str | None:
    attributes = raw_source.get("attributes")
    if not isinstance(attributes, Mapping):
        return None
    entry = attributes.get(party)
    if not isinstance(entry, Mapping):
        return None
    account = entry.get(f"{party}Account")
    if not isinstance(account, Mapping):
        return None
    iban = account.get("iban")
    if not isinstance(iban, str) or not iban.strip():
        return None
    return normalize_iban(iban)


def is_internal_transfer(transaction: Transaction, owned: Collection[str]) -> bool:
    """
    True when both sides of a synced payment are accounts in ``owned``.

    Only bank API payloads carry creditor and debtor accounts; when either
    side is missing the transaction is not treated as internal.
    """
    creditor = _party_iban(transaction.raw_source, "creditor")
    debtor = _party_iban(transaction.raw_source, "debtor")
    if creditor is None or debtor is None:
        return False
    return creditor in owned and debtor in owned


def categorize(
    transaction: Transaction, *, owned: Collection[str] = frozenset()
) -> str:
    """
    Assign a spending category to ``transaction``.

    Args:
        transaction: Stored transaction to classify
        owned: Normalized IBANs of the ledger's own accounts; payments
            between two of them are categorized as transfers

    Returns:
        One of ``CATEGORIES``
    """
    if owned and is_internal_transfer(transaction, owned):
        return TRANSFER
    text = f"{transaction.description} {transaction.counterparty}".casefold()
    for rule in CATEGORY_RULES:
        if rule.matches(text):
            return rule.category
    return OTHER
