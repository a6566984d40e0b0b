from invoicing.utils.pagination import (
    MAX_QUERY_LENGTH,
    PAGINATION_SIZES,
    ListingParams,
)


def test_listing_params_defaults(app):
    with app.test_request_context("/"):
        params = ListingParams.from_request()
    assert params == ListingParams("", 1, PAGINATION_SIZES[0])


def test_listing_params_accepts_allowed_page_size(app):
    with app.test_request_context("/?per_page=25&page=3&query=rabbit"):
        params = ListingParams.from_request()
    assert (params.query, params.page, params.per_page) == ("rabbit", 3, 25)


def test_listing_params_rejects_invalid_values(app):
    with app.test_request_context("/?per_page=7&page=-4"):
        params = ListingParams.from_request()
    assert params.per_page == PAGINATION_SIZES[0]
    assert params.page == 1


def test_listing_params_truncates_long_search(app):
    with app.test_request_context("/?query=" + "x" * 500):
        params = ListingParams.from_request()
    assert params.query == "x" * MAX_QUERY_LENGTH


def test_cache_variant_ignores_unknown_parameters(app):
    with app.test_request_context("/?query=rabbit&page=2"):
        plain = ListingParams.from_request()
    with app.test_request_context("/?page=2&junk=1&query=%20rabbit%20&sort=x"):
        noisy = ListingParams.from_request()
    assert plain.cache_variant == noisy.cache_variant


def test_link_args_keep_search_and_page_size(app):
    params = ListingParams(query="rabbit", page=2, per_page=10)
    assert params.link_args(3) == {"page": "3", "per_page": "10", "query": "rabbit"}
    assert ListingParams().link_args(None) == {
        "page": "1",
        "per_page": str(PAGINATION_SIZES[0]),
    }
