"""Tests for RepositorySelector."""

from hubsync import RepositoryDescriptor, RepositorySelector, parse_name_filter


def _repos(*names):
    return [RepositoryDescriptor(n, f"https://src/eng/{n}.git", "main", "eng") for n in names]


class TestParseNameFilter:
    def test_none(self):
        assert parse_name_filter(None) is None

    def test_single_name(self):
        assert parse_name_filter("api") == {"api"}

    def test_comma_separated(self):
        assert parse_name_filter("api,web,docs") == {"api", "web", "docs"}

    def test_whitespace_and_blanks_ignored(self):
        assert parse_name_filter(" api , ,web,") == {"api", "web"}

    def test_blank_filter_means_no_filter(self):
        assert parse_name_filter("") is None
        assert parse_name_filter(" , ") is None


class TestRepositorySelector:
    def test_no_filter_selects_all(self):
        selector = RepositorySelector()
        assert [r.name for r in selector.select(_repos("a", "b", "c"))] == ["a", "b", "c"]

    def test_filter_selects_exact_subset(self):
        selector = RepositorySelector("c,a")
        assert [r.name for r in selector.select(_repos("a", "b", "c"))] == ["a", "c"]

    def test_unknown_names_select_nothing(self):
        selector = RepositorySelector("zzz")
        assert list(selector.select(_repos("a", "b"))) == []

    def test_no_prefix_matching(self):
        selector = RepositorySelector("api")
        assert not selector.is_selected("api-gateway")
        assert selector.is_selected("api")

    def test_every_filter_value(self):
        names = ["a", "b", "c", "d"]
        for mask in range(1 << len(names)):
            wanted = [n for i, n in enumerate(names) if mask & (1 << i)]
            if not wanted:
                continue
            selector = RepositorySelector(",".join(wanted))
            assert [r.name for r in selector.select(_repos(*names))] == wanted
