"""
Query builder tests: FilterSpec -> /discover/movie parameters
"""
from filmly.schemas.movie import AVAILABLE_COUNTRIES, Country
from filmly.schemas.search import FilterSpec

BASELINE = {
    "language": "en-US",
    "sort_by": "popularity.desc",
    "include_adult": "false",
    "include_video": "false",
}


def test_empty_filter_emits_only_baseline():
    params = FilterSpec().to_tmdb_params(page=1)

    assert params == {**BASELINE, "page": "1"}


def test_year_and_genre_filter_matches_expected_pairs():
    params = FilterSpec(min_year=2020, selected_genres=[28]).to_tmdb_params(page=1)

    assert params["primary_release_date.gte"] == "2020-01-01"
    assert params["with_genres"] == "28"
    assert "primary_release_date.lte" not in params
    assert set(params) == set(BASELINE) | {"page", "primary_release_date.gte", "with_genres"}


def test_all_filters_set():
    filters = FilterSpec(
        min_year=1990,
        max_year=1999,
        min_rating=6,
        max_rating=8.5,
        selected_genres=[28, 12, 16],
        selected_countries=[Country(id="US", name="United States"), Country(id="JP", name="Japan")],
    )

    params = filters.to_tmdb_params(page=3)

    assert params == {
        **BASELINE,
        "page": "3",
        "primary_release_date.gte": "1990-01-01",
        "primary_release_date.lte": "1999-12-31",
        "vote_average.gte": "6.0",
        "vote_average.lte": "8.5",
        "with_genres": "28,12,16",
        "with_origin_country": "US,JP",
    }


def test_contradictory_bounds_are_passed_through():
    filters = FilterSpec(min_year=2024, max_year=2000, min_rating=9.0, max_rating=2.0)

    params = filters.to_tmdb_params(page=1)

    assert params["primary_release_date.gte"] == "2024-01-01"
    assert params["primary_release_date.lte"] == "2000-12-31"
    assert params["vote_average.gte"] == "9.0"
    assert params["vote_average.lte"] == "2.0"


def test_zero_rating_is_a_real_bound():
    params = FilterSpec(min_rating=0.0).to_tmdb_params()

    assert params["vote_average.gte"] == "0.0"


def test_language_can_be_overridden():
    params = FilterSpec().to_tmdb_params(page=2, language="fr-FR")

    assert params["language"] == "fr-FR"
    assert params["page"] == "2"


def test_duplicate_genres_and_countries_are_collapsed_in_order():
    us = AVAILABLE_COUNTRIES[0]
    filters = FilterSpec(selected_genres=[35, 28, 35], selected_countries=[us, us])

    assert filters.selected_genres == [35, 28]
    assert filters.to_tmdb_params()["with_origin_country"] == "US"


def test_active_filter_count_and_description():
    assert FilterSpec().is_empty
    assert FilterSpec().description == "no filters"

    filters = FilterSpec(min_year=2019, min_rating=5.0, selected_genres=[18])

    assert filters.active_filter_count == 3
    assert not filters.is_empty
    assert filters.description == "minYear=2019, minRating=5.0, genres=[18]"


def test_available_countries_are_fixed():
    codes = [c.id for c in AVAILABLE_COUNTRIES]

    assert len(codes) == 15
    assert codes[:3] == ["US", "GB", "CA"]
    assert len(set(codes)) == 15
