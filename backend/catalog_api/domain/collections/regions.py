"""Country to pricing-region resolution."""

from __future__ import annotations

from typing import Mapping, Optional

from catalog_api.domain.collections.exceptions import RegionNotFound

# Pricing regions and the ISO 3166-1 alpha-2 countries billed in each.
REGIONS: Mapping[str, frozenset[str]] = {
	"US": frozenset({"US", "PR", "GU", "VI", "AS", "MP", "UM"}),
	"CA": frozenset({"CA"}),
	"GB": frozenset({"GB", "IM", "JE", "GG"}),
	"EURO": frozenset(
		{
			"AT", "BE", "CY", "DE", "EE", "ES", "FI", "FR", "GR", "HR", "IE", "IT",
			"LT", "LU", "LV", "MT", "NL", "PT", "SI", "SK", "AD", "MC", "SM", "VA",
			"ME", "XK",
		}
	),
	"EUR_OTHER": frozenset({"BG", "CZ", "DK", "HU", "PL", "RO", "SE", "IS", "LI", "NO", "CH"}),
	"BR": frozenset({"BR"}),
	"MX": frozenset({"MX"}),
	"LATAM": frozenset({"AR", "BO", "CL", "CO", "CR", "EC", "GT", "HN", "NI", "PA", "PE", "PY", "SV", "UY", "VE"}),
	"AU": frozenset({"AU"}),
	"NZ": frozenset({"NZ"}),
	"JP": frozenset({"JP"}),
	"KR": frozenset({"KR"}),
	"CN": frozenset({"CN", "HK", "MO", "TW"}),
	"IN": frozenset({"IN", "BD", "NP", "LK"}),
	"SEA": frozenset({"ID", "MY", "PH", "SG", "TH", "VN"}),
	"TR": frozenset({"TR"}),
	"ZA": frozenset({"ZA"}),
	"MENA": frozenset({"AE", "BH", "EG", "JO", "KW", "MA", "OM", "QA", "SA", "TN"}),
	"UA": frozenset({"UA"}),
}

_COUNTRY_TO_REGION: dict[str, str] = {
	country: region for region, countries in REGIONS.items() for country in countries
}


def region_for_country(country: str) -> str:
	region = _COUNTRY_TO_REGION.get(country.strip().upper())
	if region is None:
		raise RegionNotFound()
	return region


def resolve_region(
	country: Optional[str],
	cookie_country: Optional[str] = None,
	*,
	default_country: str = "US",
) -> str:
	"""Region for the explicit country, else the cookie country, else the default."""
	selected = country or cookie_country or default_country
	return region_for_country(selected)


def is_region(code: str) -> bool:
	return code in REGIONS
