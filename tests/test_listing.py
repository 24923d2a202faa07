"""Unit tests for the listing pipeline (no I/O)."""

from listing import (
    ListingQuery,
    distinct_categories,
    parse_positive_int,
    parse_status,
    run_listing,
)
from tests.conftest import make_product


def _priced(*prices):
    return [
        make_product(f"65b0000000000000000000{i:02d}", f"Item {i}", price)
        for i, price in enumerate(prices)
    ]


class TestParsing:

    def test_page_defaults_when_absent(self):
        assert parse_positive_int(None, 1) == 1

    def test_non_numeric_falls_back_to_default(self):
        assert parse_positive_int("abc", 10) == 10

    def test_zero_and_negative_fall_back_to_default(self):
        assert parse_positive_int("0", 10) == 10
        assert parse_positive_int("-3", 1) == 1

    def test_numeric_string_is_parsed(self):
        assert parse_positive_int(" 4 ", 1) == 4

    def test_status_absent_stays_none(self):
        assert parse_status(None) is None

    def test_status_false_is_not_none(self):
        assert parse_status("false") is False
        assert parse_status("FALSE") is False
        assert parse_status("0") is False

    def test_status_true(self):
        assert parse_status("true") is True

    def test_unrecognized_status_is_treated_as_absent(self):
        assert parse_status("maybe") is None

    def test_blank_query_is_absent(self):
        params = ListingQuery.from_params(query="   ")
        assert params.query is None


class TestPipelineOrder:

    def test_sort_happens_before_pagination(self):
        products = _priced(30, 10, 20)
        result = run_listing(products, ListingQuery.from_params(sort="asc", limit="2", page="1"))
        assert [p.price for p in result.items] == [10, 20]
        assert result.has_next_page is True
        assert result.total_pages == 2

    def test_second_page_after_sort(self):
        products = _priced(30, 10, 20)
        result = run_listing(products, ListingQuery.from_params(sort="asc", limit="2", page="2"))
        assert [p.price for p in result.items] == [30]
        assert result.has_next_page is False
        assert result.has_prev_page is True

    def test_filter_happens_before_pagination(self):
        products = [
            make_product("65b000000000000000000001", "Red Shirt", 5),
            make_product("65b000000000000000000002", "Mug", 6, category="Home"),
            make_product("65b000000000000000000003", "Blue Shirt", 7),
        ]
        result = run_listing(products, ListingQuery.from_params(query="shirt", limit="2"))
        assert [p.title for p in result.items] == ["Red Shirt", "Blue Shirt"]
        assert result.total_count == 2
        assert result.has_next_page is False


class TestFilters:

    def test_query_matches_description_case_insensitively(self, products):
        result = run_listing(products, ListingQuery.from_params(query="shirt"))
        assert [p.title for p in result.items] == ["Cotton Tee"]

    def test_query_matches_category(self, products):
        result = run_listing(products, ListingQuery.from_params(query="foot"))
        assert [p.title for p in result.items] == ["Leather Boots"]

    def test_absent_query_returns_everything(self, products):
        result = run_listing(products, ListingQuery.from_params())
        assert result.total_count == 3

    def test_category_is_exact_and_case_insensitive(self, products):
        result = run_listing(products, ListingQuery.from_params(category="home"))
        assert [p.title for p in result.items] == ["Ceramic Mug"]
        result = run_listing(products, ListingQuery.from_params(category="hom"))
        assert result.items == []

    def test_status_absent_returns_both(self, products):
        result = run_listing(products, ListingQuery.from_params())
        assert {p.status for p in result.items} == {True, False}

    def test_status_false_returns_only_unavailable(self, products):
        result = run_listing(products, ListingQuery.from_params(status="false"))
        assert [p.title for p in result.items] == ["Leather Boots"]

    def test_status_true_returns_only_available(self, products):
        result = run_listing(products, ListingQuery.from_params(status="true"))
        assert all(p.status for p in result.items)
        assert result.total_count == 2


class TestSort:

    def test_desc(self):
        result = run_listing(_priced(10, 30, 20), ListingQuery.from_params(sort="DESC"))
        assert [p.price for p in result.items] == [30, 20, 10]

    def test_unknown_sort_keeps_order(self):
        result = run_listing(_priced(10, 30, 20), ListingQuery.from_params(sort="price"))
        assert [p.price for p in result.items] == [10, 30, 20]

    def test_sort_is_stable_for_equal_prices(self):
        products = _priced(5, 1, 5, 5)
        asc = run_listing(products, ListingQuery.from_params(sort="asc"))
        assert [p.title for p in asc.items] == ["Item 1", "Item 0", "Item 2", "Item 3"]
        desc = run_listing(products, ListingQuery.from_params(sort="desc"))
        assert [p.title for p in desc.items] == ["Item 0", "Item 2", "Item 3", "Item 1"]


class TestNavigation:

    def test_empty_collection(self):
        result = run_listing([], ListingQuery.from_params())
        assert result.total_pages == 0
        assert result.has_prev_page is False
        assert result.has_next_page is False
        assert result.prev_link is None
        assert result.next_link is None

    def test_links_preserve_active_parameters(self):
        products = _priced(*range(25))
        params = ListingQuery.from_params(query="item", status="true", sort="asc", page="2", limit="5")
        result = run_listing(products, params)
        assert result.prev_link == "/api/products?query=item&status=true&sort=asc&limit=5&page=1"
        assert result.next_link == "/api/products?query=item&status=true&sort=asc&limit=5&page=3"
        assert result.prev_page == 1
        assert result.next_page == 3

    def test_links_use_given_base_path(self):
        result = run_listing(_priced(*range(12)), ListingQuery.from_params(), base_path="/products")
        assert result.next_link == "/products?page=2"

    def test_categories_come_from_unfiltered_collection(self, products):
        result = run_listing(products, ListingQuery.from_params(category="Home"))
        assert result.categories == ["Clothing", "Footwear", "Home"]

    def test_distinct_categories_deduplicates(self):
        products = [
            make_product("65b000000000000000000001", "A", 1, category="Toys"),
            make_product("65b000000000000000000002", "B", 1, category="Books"),
            make_product("65b000000000000000000003", "C", 1, category="Toys"),
        ]
        assert distinct_categories(products) == ["Books", "Toys"]

    def test_response_shape(self, products):
        body = run_listing(products, ListingQuery.from_params()).to_response()
        assert body["status"] == "success"
        assert len(body["payload"]) == 3
        assert body["page"] == 1
        assert body["totalPages"] == 1
        assert body["prevPage"] is None
        assert body["nextPage"] is None
        assert body["prevLink"] is None
        assert body["nextLink"] is None
