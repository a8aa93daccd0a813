import pytest

from catalog_api.domain.collections import regions
from catalog_api.domain.collections.exceptions import RegionNotFound


@pytest.mark.parametrize(
	"country,region",
	[("US", "US"), ("de", "EURO"), (" fr ", "EURO"), ("PL", "EUR_OTHER"), ("AR", "LATAM"), ("HK", "CN"), ("GB", "GB")],
)
def test_region_for_country(country, region):
	assert regions.region_for_country(country) == region


def test_every_country_maps_to_exactly_one_region():
	seen: dict[str, str] = {}
	for region, countries in regions.REGIONS.items():
		for country in countries:
			assert country not in seen, f"{country} in {seen.get(country)} and {region}"
			seen[country] = region


def test_unknown_country_raises_404():
	with pytest.raises(RegionNotFound) as excinfo:
		regions.region_for_country("ZZ")
	assert excinfo.value.status_code == 404
	assert excinfo.value.detail == "country_not_found"


def test_query_country_beats_cookie_then_default():
	assert regions.resolve_region("GB", "DE") == "GB"
	assert regions.resolve_region(None, "DE") == "EURO"
	assert regions.resolve_region(None, None) == "US"
	assert regions.resolve_region("", None, default_country="JP") == "JP"


def test_is_region():
	assert regions.is_region("EURO")
	assert not regions.is_region("DE")
