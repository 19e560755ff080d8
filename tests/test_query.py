"""
Unit tests for the list query builder.

Run with:
    python -m pytest tests/test_query.py
"""
import unittest

from game_vault.models import FilterState, PageState, Platform, Status
from game_vault.query import build_query


class TestBuildQuery(unittest.TestCase):

    def test_defaults_only_page_and_limit(self):
        self.assertEqual(build_query(FilterState(), PageState()), {"page": 1, "limit": 8})

    def test_filters_use_wire_values(self):
        filters = FilterState(status=Status.FINISHED, platform=Platform.SWITCH, q="zelda")
        query = build_query(filters, PageState(page=2, limit=4))
        self.assertEqual(
            query,
            {"status": "finished", "platform": "Switch", "q": "zelda", "page": 2, "limit": 4},
        )

    def test_never_sends_all(self):
        for status in ("all", *Status):
            for platform in ("all", *Platform):
                query = build_query(FilterState(status=status, platform=platform), PageState())
                self.assertNotEqual(query.get("status"), "all")
                self.assertNotEqual(query.get("platform"), "all")

    def test_empty_search_omitted(self):
        self.assertNotIn("q", build_query(FilterState(q=""), PageState()))

    def test_overrides_win(self):
        filters = FilterState(status=Status.PLAYING, q="mario")
        query = build_query(filters, PageState(page=5), {"page": 1, "q": ""})
        self.assertEqual(query, {"status": "playing", "page": 1, "limit": 8})

    def test_override_can_set_all(self):
        filters = FilterState(platform=Platform.PC)
        self.assertNotIn("platform", build_query(filters, PageState(), {"platform": "all"}))

    def test_unknown_override_rejected(self):
        with self.assertRaises(TypeError):
            build_query(FilterState(), PageState(), {"sort": "name"})


class TestPageState(unittest.TestCase):

    def test_total_pages(self):
        self.assertEqual(PageState(total=17, limit=8).total_pages, 3)
        self.assertEqual(PageState(total=16, limit=8).total_pages, 2)
        self.assertEqual(PageState(total=0, limit=8).total_pages, 1)

    def test_clamp(self):
        pagination = PageState(total=17, limit=8)
        self.assertEqual(pagination.clamp(0), 1)
        self.assertEqual(pagination.clamp(2), 2)
        self.assertEqual(pagination.clamp(9), 3)


if __name__ == '__main__':
    unittest.main()
