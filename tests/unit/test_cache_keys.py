"""Tests for cache key construction."""

import fnmatch
import uuid

from finlit.cache import CacheKeys

CONTENT_ID = uuid.UUID("6f1c2a7e-0000-4000-8000-000000000001")


class TestContentKeys:
    def test_category_page(self) -> None:
        key = CacheKeys.category_page("budgeting", 1, 10, "beginner", True)

        assert key == "learning-content:category:budgeting:1:10:beginner:true"

    def test_unset_filters_render_as_all(self) -> None:
        key = CacheKeys.all_content_page(2, 20, None, None, None, None)

        assert key == "learning-content:list:2:20:all:all:all:all"

    def test_explicit_false_differs_from_unset(self) -> None:
        unset = CacheKeys.all_content_page(1, 10, None, None, None, None)
        unpublished = CacheKeys.all_content_page(1, 10, None, None, False, None)

        assert unset != unpublished
        assert unpublished.endswith(":false:all")

    def test_every_filter_is_part_of_the_key(self) -> None:
        base = CacheKeys.category_page("budgeting", 1, 10, None, True)

        assert base != CacheKeys.category_page("budgeting", 2, 10, None, True)
        assert base != CacheKeys.category_page("budgeting", 1, 20, None, True)
        assert base != CacheKeys.category_page("budgeting", 1, 10, "advanced", True)
        assert base != CacheKeys.category_page("saving", 1, 10, None, True)

    def test_document_and_views(self) -> None:
        assert CacheKeys.content(CONTENT_ID) == f"learning-content:{CONTENT_ID}"
        assert CacheKeys.content_views(CONTENT_ID) == f"learning-content:views:{CONTENT_ID}"
        assert CacheKeys.stats(CONTENT_ID) == f"learning-content:stats:{CONTENT_ID}"


class TestNamespaces:
    def test_category_namespace_matches_its_pages_only(self) -> None:
        pattern = CacheKeys.category_namespace("budgeting")

        assert fnmatch.fnmatchcase(
            CacheKeys.category_page("budgeting", 3, 10, None, True), pattern
        )
        assert not fnmatch.fnmatchcase(
            CacheKeys.category_page("saving", 1, 10, None, True), pattern
        )
        assert not fnmatch.fnmatchcase(CacheKeys.content(CONTENT_ID), pattern)

    def test_listing_namespace(self) -> None:
        pattern = CacheKeys.listing_namespace()

        assert pattern == "learning-content:list:*"
        assert fnmatch.fnmatchcase(
            CacheKeys.all_content_page(1, 10, "budgeting", None, True, None), pattern
        )

    def test_glob_characters_are_escaped(self) -> None:
        assert CacheKeys.category_namespace("a*b") == "learning-content:category:a\\*b:*"


class TestFinanceKeys:
    def test_finance_page(self) -> None:
        key = CacheKeys.finance_page("finance-basics", 1, 10, "beginner", True)

        assert key == "finance-basics:1:10:beginner:true"

    def test_finance_lesson_under_module_namespace(self) -> None:
        key = CacheKeys.finance_lesson("sip-learning", CONTENT_ID)

        assert key == f"sip-learning:{CONTENT_ID}"
        assert fnmatch.fnmatchcase(key, CacheKeys.namespace("sip-learning"))
