"""Cache key construction.

All keys are colon-delimited namespaces so a whole namespace can be purged
with one glob:

    learning-content:<id>                                   single document
    learning-content:views:<id>                             view counter hash
    learning-content:category:<slug>:<page>:<limit>:<difficulty>:<published>
    learning-content:list:<page>:<limit>:<slug>:<difficulty>:<published>:<creator>
    learning-content:stats:<user_id>                        per-user stats
    <module>:<page>:<limit>:<difficulty>:<published>        finance module page
    <module>:<id>                                           finance lesson

Unset filters render as "all" so that a missing filter and an explicit one
never share a key.
"""

from typing import Any

CONTENT_RESOURCE = "learning-content"

UNSET = "all"

_GLOB_SPECIAL = ("\\", "*", "?", "[", "]")


def _part(value: Any) -> str:
    if value is None or value == "":
        return UNSET
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _escape_glob(value: str) -> str:
    for char in _GLOB_SPECIAL:
        value = value.replace(char, f"\\{char}")
    return value


class CacheKeys:
    """Deterministic key builders for every cached resource."""

    # -------------------------------------------------------------------------
    # Generic shapes
    # -------------------------------------------------------------------------

    @staticmethod
    def list_page(resource: str, page: int, limit: int, *filters: Any) -> str:
        """Key for one page of a filtered listing."""
        parts = [resource, str(page), str(limit), *(_part(f) for f in filters)]
        return ":".join(parts)

    @staticmethod
    def document(resource: str, document_id: Any) -> str:
        return f"{resource}:{document_id}"

    @staticmethod
    def views(resource: str, document_id: Any) -> str:
        return f"{resource}:views:{document_id}"

    @staticmethod
    def namespace(resource: str) -> str:
        """Glob matching every key under a resource prefix."""
        return f"{_escape_glob(resource)}:*"

    # -------------------------------------------------------------------------
    # Learning content
    # -------------------------------------------------------------------------

    @staticmethod
    def category_page(
        category_slug: str,
        page: int,
        limit: int,
        difficulty: str | None,
        is_published: bool,
    ) -> str:
        return CacheKeys.list_page(
            f"{CONTENT_RESOURCE}:category:{category_slug}",
            page,
            limit,
            difficulty,
            is_published,
        )

    @staticmethod
    def all_content_page(
        page: int,
        limit: int,
        category_slug: str | None,
        difficulty: str | None,
        is_published: bool | None,
        created_by: Any | None,
    ) -> str:
        return CacheKeys.list_page(
            f"{CONTENT_RESOURCE}:list",
            page,
            limit,
            category_slug,
            difficulty,
            is_published,
            created_by,
        )

    @staticmethod
    def content(content_id: Any) -> str:
        return CacheKeys.document(CONTENT_RESOURCE, content_id)

    @staticmethod
    def content_views(content_id: Any) -> str:
        return CacheKeys.views(CONTENT_RESOURCE, content_id)

    @staticmethod
    def stats(user_id: Any) -> str:
        return f"{CONTENT_RESOURCE}:stats:{user_id}"

    @staticmethod
    def category_namespace(category_slug: str) -> str:
        return CacheKeys.namespace(f"{CONTENT_RESOURCE}:category:{category_slug}")

    @staticmethod
    def listing_namespace() -> str:
        return CacheKeys.namespace(f"{CONTENT_RESOURCE}:list")

    # -------------------------------------------------------------------------
    # Finance learning modules
    # -------------------------------------------------------------------------

    @staticmethod
    def finance_page(
        module: str,
        page: int,
        limit: int,
        difficulty: str | None,
        is_published: bool,
    ) -> str:
        return CacheKeys.list_page(module, page, limit, difficulty, is_published)

    @staticmethod
    def finance_lesson(module: str, lesson_id: Any) -> str:
        return CacheKeys.document(module, lesson_id)
