"""Normalization of heterogeneous leaderboard payloads.

Leaderboard producers disagree on field names, nesting, and number
formatting. Each logical field is resolved by an ordered tuple of named
extractors; the first extractor yielding a present value wins and the
resolution is reported as an :class:`Extraction` so logs can say which alias
a producer used. Entries that cannot be resolved into a valid
:class:`ContributorRecord` are dropped individually; normalization as a whole
never fails.
"""

from __future__ import annotations

import collections.abc as cabc
import dataclasses
import math
import re
import typing as typ

from rewards_oracle.ledger.address import is_valid_address
from rewards_oracle.logging import get_logger, log_debug, log_info, log_warning

from .models import FALLBACK_CATEGORY, ContributorRecord, XpBreakdown, XpCategory

if typ.TYPE_CHECKING:
    from rewards_oracle.logging import SupportsLog

logger = get_logger(__name__)

Item = cabc.Mapping[str, typ.Any]

_FLOAT_PREFIX = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")
_INT_PREFIX = re.compile(r"^\s*([+-]?\d+)")

_LIST_KEYS = ("leaderboard", "contributors")


@dataclasses.dataclass(frozen=True, slots=True)
class FieldExtractor:
    """One named attempt at reading a logical field from an entry."""

    source: str
    extract: cabc.Callable[[Item], object]


@dataclasses.dataclass(frozen=True, slots=True)
class Extraction:
    """Successful resolution of a logical field."""

    field: str
    source: str
    value: object


def _is_present(value: object) -> bool:
    """Return True for values a producer meant as "set"."""
    if isinstance(value, float) and math.isnan(value):
        return False
    return value is not None and value is not False and value != "" and value != 0


def key(name: str) -> FieldExtractor:
    """Return an extractor reading the top-level key ``name``."""
    return FieldExtractor(source=name, extract=lambda item: item.get(name))


def nested_key(parent: str, name: str) -> FieldExtractor:
    """Return an extractor reading ``item[parent][name]``."""

    def _extract(item: Item) -> object:
        container = item.get(parent)
        if isinstance(container, cabc.Mapping):
            return container.get(name)
        return None

    return FieldExtractor(source=f"{parent}.{name}", extract=_extract)


def first_string(parent: str) -> FieldExtractor:
    """Return an extractor yielding the first non-empty string in ``item[parent]``."""

    def _extract(item: Item) -> object:
        container = item.get(parent)
        if not isinstance(container, cabc.Mapping):
            return None
        return next(
            (value for value in container.values() if isinstance(value, str) and value),
            None,
        )

    return FieldExtractor(source=f"{parent}.*", extract=_extract)


def resolve(
    field: str,
    item: Item,
    extractors: cabc.Sequence[FieldExtractor],
) -> Extraction | None:
    """Try ``extractors`` in priority order and return the first present value."""
    for extractor in extractors:
        value = extractor.extract(item)
        if _is_present(value):
            return Extraction(field=field, source=extractor.source, value=value)
    return None


USERNAME_FIELDS: tuple[FieldExtractor, ...] = (
    key("github_username"),
    key("githubUsername"),
    key("username"),
    key("github"),
)

NESTED_WALLET_FIELDS: tuple[FieldExtractor, ...] = (
    nested_key("wallets", "sol"),
    nested_key("wallets", "solana"),
    first_string("wallets"),
)

FLAT_WALLET_FIELDS: tuple[FieldExtractor, ...] = (
    key("wallet"),
    key("wallet_address"),
    key("walletAddress"),
    key("address"),
)

XP_FIELDS: tuple[FieldExtractor, ...] = (
    key("score"),
    key("xp"),
    key("totalXp"),
    key("total_xp"),
    key("points"),
)

CATEGORY_FIELDS: dict[str, tuple[FieldExtractor, ...]] = {
    "role": (key("role_xp"), key("roleXp"), key("roles")),
    "domain": (key("domain_xp"), key("domainXp"), key("domains")),
    "skill": (key("skill_xp"), key("skillXp"), key("skills")),
}

LEGACY_SCORE_FIELDS: tuple[tuple[str, str], ...] = (
    ("prScore", "pr"),
    ("issueScore", "issue"),
    ("reviewScore", "review"),
    ("commentScore", "comment"),
)


def parse_number(value: object) -> float | None:
    """Parse a leading decimal number from a JSON scalar.

    Numbers pass through; strings contribute their longest numeric prefix
    (``"12.5 pts"`` parses as ``12.5``). Booleans, containers, and
    non-finite values do not parse.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return float(value)
    if isinstance(value, float):
        number = value
    elif isinstance(value, str):
        match = _FLOAT_PREFIX.match(value)
        if match is None:
            return None
        number = float(match.group(1))
    else:
        return None
    return number if math.isfinite(number) else None


def round_half_up(number: float) -> int:
    """Round to the nearest integer with halves rounded towards +infinity."""
    return math.floor(number + 0.5)


def coerce_total_xp(value: object) -> int:
    """Return the integer XP for a raw score, or ``0`` when it does not parse."""
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    number = parse_number(value)
    return 0 if number is None else round_half_up(number)


def parse_amount(value: object) -> int | None:
    """Parse a category amount, truncating fractional input."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return math.trunc(value) if math.isfinite(value) else None
    if isinstance(value, str):
        match = _INT_PREFIX.match(value)
        return int(match.group(1)) if match else None
    return None


def parse_categories(data: object) -> tuple[XpCategory, ...]:
    """Interpret ``data`` as an ordered name → amount mapping.

    Non-mappings yield no categories; entries whose amount does not parse to
    a positive integer are skipped.
    """
    if not isinstance(data, cabc.Mapping):
        return ()
    categories: list[XpCategory] = []
    for name, raw_amount in data.items():
        amount = parse_amount(raw_amount)
        if amount is not None and amount > 0:
            categories.append(XpCategory(name=str(name), amount=amount))
    return tuple(categories)


def legacy_role_categories(item: Item) -> tuple[XpCategory, ...]:
    """Remap legacy per-activity scores into role categories."""
    if not any(_is_present(item.get(field)) for field, _ in LEGACY_SCORE_FIELDS):
        return ()
    categories: list[XpCategory] = []
    for field, name in LEGACY_SCORE_FIELDS:
        number = parse_number(item.get(field))
        if number is None or number <= 0:
            continue
        amount = round_half_up(number)
        if amount > 0:
            categories.append(XpCategory(name=name, amount=amount))
    return tuple(categories)


def _leaderboard_items(payload: object) -> cabc.Sequence[object]:
    """Return the contributor list from any supported payload shape."""
    if isinstance(payload, list):
        return payload
    if isinstance(payload, cabc.Mapping):
        for list_key in _LIST_KEYS:
            candidate = payload.get(list_key)
            if isinstance(candidate, list):
                return candidate
    return ()


class ContributorNormalizer:
    """Parse leaderboard payloads into canonical contributor records."""

    def __init__(self, *, logger: SupportsLog | None = None) -> None:
        """Bind the normalizer to a logger (defaults to the module logger)."""
        self._logger = logger or get_logger(__name__)

    def normalize(self, payload: object) -> list[ContributorRecord]:
        """Return valid contributor records in payload order.

        Accepts a bare list of entries, ``{"leaderboard": [...]}``, or
        ``{"contributors": [...]}``. Any other shape yields an empty list.
        """
        items = _leaderboard_items(payload)
        records: list[ContributorRecord] = []
        for index, item in enumerate(items):
            record = self.parse_contributor(item, index=index)
            if record is not None:
                records.append(record)

        log_info(
            self._logger,
            "Parsed %d contributors from leaderboard (%d dropped)",
            len(records),
            len(items) - len(records),
        )
        return records

    def parse_contributor(
        self, item: object, *, index: int = 0
    ) -> ContributorRecord | None:
        """Return a canonical record for ``item`` or ``None`` if it is invalid."""
        if not isinstance(item, cabc.Mapping):
            return self._drop(index, "entry is not an object")

        username = self._resolve_username(item)
        wallet = self._resolve_wallet(item)
        xp = resolve("total_xp", item, XP_FIELDS)
        total_xp = coerce_total_xp(xp.value) if xp is not None else 0

        if username is None:
            return self._drop(index, "missing username")
        if wallet is None:
            return self._drop(index, f"missing wallet for {username}")
        if total_xp <= 0:
            return self._drop(index, f"non-positive XP for {username}")
        if not is_valid_address(wallet):
            return self._drop(index, f"invalid wallet address {wallet!r}")

        return ContributorRecord(
            username=username,
            wallet_address=wallet,
            total_xp=total_xp,
            categories=self._categories(item, username, total_xp),
        )

    def _resolve_username(self, item: Item) -> str | None:
        extraction = resolve("username", item, USERNAME_FIELDS)
        if extraction is None or not isinstance(extraction.value, str):
            return None
        return extraction.value.strip() or None

    def _resolve_wallet(self, item: Item) -> str | None:
        # A wallets map, when present, is the only wallet source.
        fields = (
            NESTED_WALLET_FIELDS
            if isinstance(item.get("wallets"), cabc.Mapping)
            else FLAT_WALLET_FIELDS
        )
        extraction = resolve("wallet", item, fields)
        if extraction is None:
            return None
        log_debug(self._logger, "Resolved wallet from %s", extraction.source)
        return extraction.value if isinstance(extraction.value, str) else None

    def _categories(self, item: Item, username: str, total_xp: int) -> XpBreakdown:
        groups: dict[str, tuple[XpCategory, ...]] = {}
        for group, extractors in CATEGORY_FIELDS.items():
            extraction = resolve(group, item, extractors)
            groups[group] = parse_categories(
                extraction.value if extraction is not None else None
            )
        breakdown = XpBreakdown(**groups)
        if not breakdown.is_empty:
            return breakdown

        legacy = legacy_role_categories(item)
        if legacy:
            return XpBreakdown(role=legacy)

        log_warning(
            self._logger,
            "No XP breakdown found for %s; using default %s category",
            username,
            FALLBACK_CATEGORY,
        )
        return XpBreakdown(role=(XpCategory(name=FALLBACK_CATEGORY, amount=total_xp),))

    def _drop(self, index: int, reason: str) -> None:
        log_warning(self._logger, "Dropping leaderboard entry %d: %s", index, reason)


def normalize_leaderboard(payload: object) -> list[ContributorRecord]:
    """Normalize ``payload`` with a default :class:`ContributorNormalizer`."""
    return ContributorNormalizer().normalize(payload)
