"""Tests for result filtering."""

from prospector.filters import FilterPredicates, filter_results
from prospector.models import BusinessData, SearchResult


def result(source_id, name, **fields):
    return SearchResult(source_id=source_id, business_data=BusinessData(name=name, **fields))


RESULTS = [
    result("r0", "A", rating=4.8, website="https://a.fr"),
    result("r1", "B", rating=3.2),
    result("r2", "C", rating=4.5),
    result("r3", "D"),
]


class TestFilterResults:
    """Test filter_results()."""

    def test_no_filters_keeps_everything(self):
        assert filter_results(RESULTS) == RESULTS
        assert filter_results(RESULTS, FilterPredicates()) == RESULTS

    def test_max_rating(self):
        """Ratings above the maximum should be dropped, unrated kept."""
        kept = filter_results(RESULTS, FilterPredicates(max_rating=4.0))
        assert [r.business_data.name for r in kept] == ["B", "D"]

    def test_no_website_only(self):
        kept = filter_results(RESULTS, FilterPredicates(no_website_only=True))
        assert [r.business_data.name for r in kept] == ["B", "C", "D"]

    def test_filters_combined_with_and(self):
        """Both predicates must hold."""
        kept = filter_results(RESULTS, FilterPredicates(max_rating=4.6, no_website_only=True))
        assert [r.business_data.name for r in kept] == ["B", "C", "D"]
        kept = filter_results(RESULTS, FilterPredicates(max_rating=4.0, no_website_only=True))
        assert [r.business_data.name for r in kept] == ["B", "D"]

    def test_min_score(self):
        """Local score threshold on the 0-10 scale."""
        kept = filter_results(RESULTS, FilterPredicates(min_score=9))
        assert [r.business_data.name for r in kept] == ["B", "D"]

    def test_input_not_modified(self):
        original = list(RESULTS)
        filter_results(RESULTS, FilterPredicates(no_website_only=True))
        assert RESULTS == original

    def test_active(self):
        assert not FilterPredicates().active
        assert FilterPredicates(min_score=0).active
