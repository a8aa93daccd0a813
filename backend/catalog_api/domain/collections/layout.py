"""Layout description of the weekly leaderboard image."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Sequence

from catalog_api.domain.collections.models import CatalogRow, PriceRecord, Window

_CURRENCY_SYMBOLS = {
	"USD": "$",
	"CAD": "CA$",
	"AUD": "A$",
	"NZD": "NZ$",
	"EUR": "€",
	"GBP": "£",
	"JPY": "¥",
	"CNY": "CN¥",
	"KRW": "₩",
	"INR": "₹",
	"BRL": "R$",
	"MXN": "MX$",
	"TRY": "₺",
	"UAH": "₴",
}
_ZERO_DECIMAL = {"JPY", "KRW"}


@dataclass(slots=True, frozen=True)
class Column:
	key: str
	label: str
	flex: float


COLUMNS: tuple[Column, ...] = (
	Column("rank", "Rank", 0.6),
	Column("title", "Title", 3.0),
	Column("discount", "Discount", 1.0),
	Column("original", "Original", 1.0),
	Column("price", "Price", 1.3),
)


@dataclass(slots=True)
class LeaderboardLayout:
	title: str
	label: str
	footer: str
	columns: tuple[Column, ...] = COLUMNS
	rows: list[tuple[str, ...]] = field(default_factory=list)
	background: str = "#0f0f23"
	background_to: str = "#1a1a3e"
	header_background: str = "#2a2a4e"
	row_backgrounds: tuple[str, str] = ("#1a1a3e", "#20204a")
	border: str = "#3a3a6e"


def format_money(amount_minor: int, currency_code: Optional[str]) -> str:
	"""Format an amount in minor units, e.g. ``1999, "USD"`` -> ``$19.99``."""
	code = (currency_code or "USD").upper()
	amount = amount_minor / 100
	if code in _ZERO_DECIMAL:
		number = f"{amount:,.0f}"
	else:
		number = f"{amount:,.2f}"
	symbol = _CURRENCY_SYMBOLS.get(code)
	if symbol is None:
		return f"{code} {number}"
	return f"{symbol}{number}"


def discount_cell(price: PriceRecord) -> str:
	percent = price.discount_percent
	if percent is None or not price.discount_price:
		return ""
	return f"-{percent}%"


def original_cell(price: PriceRecord) -> str:
	op = price.original_price
	if not op or op == price.discount_price:
		return ""
	return format_money(op, price.currency_code)


def price_cell(price: PriceRecord) -> str:
	if price.discount_price == 0:
		return "Free"
	return format_money(price.discount_price or 0, price.currency_code)


def row_cells(index: int, row: CatalogRow) -> tuple[str, ...]:
	return (
		f"#{index}",
		row.title or "N/A",
		discount_cell(row.price),
		original_cell(row.price),
		price_cell(row.price),
	)


def build_layout(
	rows: Sequence[CatalogRow],
	*,
	collection_title: str,
	window: Window,
	region: str,
	site_title: str,
) -> LeaderboardLayout:
	"""Describe the image for the top rows of a weekly leaderboard."""
	return LeaderboardLayout(
		title=f"{site_title} — {collection_title}",
		label=f"{window.week} · {region}",
		footer=f"{window.week} • {window.start:%Y-%m-%d} - {window.end:%Y-%m-%d}",
		rows=[row_cells(index, row) for index, row in enumerate(rows, start=1)],
	)
