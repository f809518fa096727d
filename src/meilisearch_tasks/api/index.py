"""Index-scoped operations: documents, settings and stats."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any
from urllib.parse import quote

from meilisearch_tasks.api.index_settings import (
    Faceting,
    IndexSettings,
    Pagination,
    TypoTolerance,
)
from meilisearch_tasks.api.models import IndexStats, Task, TaskInfo
from meilisearch_tasks.http.envelope import HttpMethod


if TYPE_CHECKING:
    import asyncio
    from collections.abc import Sequence

    from pydantic import BaseModel

    from meilisearch_tasks.api.client import Client


__all__ = ["Index"]


class Index:
    """Handle on a single index.

    Obtained from :meth:`Client.index`; creating the handle does not
    contact the server. Every mutating method returns the enqueued
    :class:`TaskInfo`.

    Example:
        ```python
        index = client.index("movies")
        info = await index.add_documents([{"id": 1, "title": "Carol"}])
        await index.wait_for_task(info.task_uid)
        ```

    Attributes:
        uid: The index uid.
    """

    def __init__(self, client: Client, uid: str) -> None:
        """Initialize the handle.

        Args:
            client: The client used for every request.
            uid: The index uid.
        """
        self._client = client
        self.uid = uid

    def __repr__(self) -> str:
        """Return a debug representation."""
        return f"Index(uid={self.uid!r})"

    @property
    def _path(self) -> str:
        return f"/indexes/{quote(self.uid)}"

    async def _task(
        self,
        method: HttpMethod,
        path: str,
        **kwargs: Any,  # noqa: ANN401
    ) -> TaskInfo:
        return await self._client._task_request(method, path, **kwargs)  # noqa: SLF001

    async def _get(
        self,
        path: str,
        model: type[BaseModel] | None = None,
    ) -> Any:  # noqa: ANN401
        return await self._client._request(HttpMethod.GET, path, model=model)  # noqa: SLF001

    # -------------------------------------------------------------------------
    # Tasks and Stats
    # -------------------------------------------------------------------------

    async def wait_for_task(
        self,
        task_uid: int,
        *,
        timeout_in_ms: float | None = None,
        interval_in_ms: float | None = None,
        abort: asyncio.Event | None = None,
    ) -> Task:
        """Wait until a task is finished. See :meth:`Client.wait_for_task`."""
        return await self._client.wait_for_task(
            task_uid,
            timeout_in_ms=timeout_in_ms,
            interval_in_ms=interval_in_ms,
            abort=abort,
        )

    async def get_stats(self) -> IndexStats:
        """Get document count, indexing state and field distribution."""
        stats: IndexStats = await self._get(f"{self._path}/stats", IndexStats)
        return stats

    # -------------------------------------------------------------------------
    # Documents
    # -------------------------------------------------------------------------

    async def add_documents(
        self,
        documents: Sequence[dict[str, Any]],
        *,
        primary_key: str | None = None,
    ) -> TaskInfo:
        """Add or replace documents.

        Args:
            documents: JSON-serializable documents.
            primary_key: Primary key attribute, used if the index has none yet.

        Returns:
            The ``documentAdditionOrUpdate`` task.
        """
        params = {"primaryKey": primary_key} if primary_key else None
        return await self._task(
            HttpMethod.POST,
            f"{self._path}/documents",
            params=params,
            json_body=list(documents),
        )

    # -------------------------------------------------------------------------
    # All Settings
    # -------------------------------------------------------------------------

    async def get_settings(self) -> IndexSettings:
        """Get every setting of the index."""
        settings: IndexSettings = await self._get(f"{self._path}/settings", IndexSettings)
        return settings

    async def update_settings(self, settings: IndexSettings) -> TaskInfo:
        """Update the settings that were explicitly set on ``settings``.

        Fields never assigned are omitted and keep their current value.

        Args:
            settings: The settings to apply.

        Returns:
            The ``settingsUpdate`` task.
        """
        return await self._task(
            HttpMethod.PATCH,
            f"{self._path}/settings",
            json_body=settings.to_update_payload(),
        )

    async def reset_settings(self) -> TaskInfo:
        """Restore every setting to its default value."""
        return await self._task(HttpMethod.DELETE, f"{self._path}/settings")

    # -------------------------------------------------------------------------
    # Individual Settings
    # -------------------------------------------------------------------------

    async def _get_setting(
        self,
        name: str,
        model: type[BaseModel] | None = None,
    ) -> Any:  # noqa: ANN401
        return await self._get(f"{self._path}/settings/{name}", model)

    async def _update_setting(
        self,
        name: str,
        value: Any,  # noqa: ANN401
        method: HttpMethod = HttpMethod.PUT,
    ) -> TaskInfo:
        return await self._task(
            method,
            f"{self._path}/settings/{name}",
            json_body=value,
        )

    async def _reset_setting(self, name: str) -> TaskInfo:
        return await self._task(HttpMethod.DELETE, f"{self._path}/settings/{name}")

    async def get_ranking_rules(self) -> list[str]:
        """Get the ranking rules."""
        rules: list[str] = await self._get_setting("ranking-rules")
        return rules

    async def update_ranking_rules(self, rules: list[str] | None) -> TaskInfo:
        """Replace the ranking rules; None resets them to the default."""
        return await self._update_setting("ranking-rules", rules)

    async def reset_ranking_rules(self) -> TaskInfo:
        """Restore the default ranking rules."""
        return await self._reset_setting("ranking-rules")

    async def get_synonyms(self) -> dict[str, list[str]]:
        """Get the synonyms map."""
        synonyms: dict[str, list[str]] = await self._get_setting("synonyms")
        return synonyms

    async def update_synonyms(
        self,
        synonyms: dict[str, list[str]] | None,
    ) -> TaskInfo:
        """Replace the synonyms; None clears them."""
        return await self._update_setting("synonyms", synonyms)

    async def reset_synonyms(self) -> TaskInfo:
        """Remove all synonyms."""
        return await self._reset_setting("synonyms")

    async def get_stop_words(self) -> list[str]:
        """Get the stop words."""
        words: list[str] = await self._get_setting("stop-words")
        return words

    async def update_stop_words(self, words: list[str] | None) -> TaskInfo:
        """Replace the stop words; None clears them."""
        return await self._update_setting("stop-words", words)

    async def reset_stop_words(self) -> TaskInfo:
        """Remove all stop words."""
        return await self._reset_setting("stop-words")

    async def get_searchable_attributes(self) -> list[str]:
        """Get the searchable attributes."""
        attributes: list[str] = await self._get_setting("searchable-attributes")
        return attributes

    async def update_searchable_attributes(
        self,
        attributes: list[str] | None,
    ) -> TaskInfo:
        """Replace the searchable attributes; None resets them to ``["*"]``."""
        return await self._update_setting("searchable-attributes", attributes)

    async def reset_searchable_attributes(self) -> TaskInfo:
        """Make every attribute searchable again."""
        return await self._reset_setting("searchable-attributes")

    async def get_displayed_attributes(self) -> list[str]:
        """Get the displayed attributes."""
        attributes: list[str] = await self._get_setting("displayed-attributes")
        return attributes

    async def update_displayed_attributes(
        self,
        attributes: list[str] | None,
    ) -> TaskInfo:
        """Replace the displayed attributes; None resets them to ``["*"]``."""
        return await self._update_setting("displayed-attributes", attributes)

    async def reset_displayed_attributes(self) -> TaskInfo:
        """Make every attribute displayed again."""
        return await self._reset_setting("displayed-attributes")

    async def get_filterable_attributes(self) -> list[str]:
        """Get the filterable attributes."""
        attributes: list[str] = await self._get_setting("filterable-attributes")
        return attributes

    async def update_filterable_attributes(
        self,
        attributes: list[str] | None,
    ) -> TaskInfo:
        """Replace the filterable attributes; None clears them."""
        return await self._update_setting("filterable-attributes", attributes)

    async def reset_filterable_attributes(self) -> TaskInfo:
        """Remove all filterable attributes."""
        return await self._reset_setting("filterable-attributes")

    async def get_sortable_attributes(self) -> list[str]:
        """Get the sortable attributes."""
        attributes: list[str] = await self._get_setting("sortable-attributes")
        return attributes

    async def update_sortable_attributes(self, attributes: list[str]) -> TaskInfo:
        """Replace the sortable attributes."""
        return await self._update_setting("sortable-attributes", attributes)

    async def reset_sortable_attributes(self) -> TaskInfo:
        """Remove all sortable attributes."""
        return await self._reset_setting("sortable-attributes")

    async def get_distinct_attribute(self) -> str | None:
        """Get the distinct attribute, or None if unset."""
        attribute: str | None = await self._get_setting("distinct-attribute")
        return attribute

    async def update_distinct_attribute(self, attribute: str | None) -> TaskInfo:
        """Set the distinct attribute; None removes it."""
        return await self._update_setting("distinct-attribute", attribute)

    async def reset_distinct_attribute(self) -> TaskInfo:
        """Remove the distinct attribute."""
        return await self._reset_setting("distinct-attribute")

    async def get_typo_tolerance(self) -> TypoTolerance:
        """Get the typo tolerance settings."""
        typo_tolerance: TypoTolerance = await self._get_setting(
            "typo-tolerance", TypoTolerance
        )
        return typo_tolerance

    async def update_typo_tolerance(self, typo_tolerance: TypoTolerance) -> TaskInfo:
        """Partially update typo tolerance; unset fields are left unchanged."""
        return await self._update_setting(
            "typo-tolerance",
            typo_tolerance.model_dump(by_alias=True, exclude_unset=True, mode="json"),
            HttpMethod.PATCH,
        )

    async def reset_typo_tolerance(self) -> TaskInfo:
        """Restore the default typo tolerance."""
        return await self._reset_setting("typo-tolerance")

    async def get_pagination(self) -> Pagination:
        """Get the pagination settings."""
        pagination: Pagination = await self._get_setting("pagination", Pagination)
        return pagination

    async def update_pagination(self, pagination: Pagination) -> TaskInfo:
        """Update the pagination settings."""
        return await self._update_setting(
            "pagination",
            pagination.model_dump(by_alias=True, exclude_unset=True, mode="json"),
            HttpMethod.PATCH,
        )

    async def reset_pagination(self) -> TaskInfo:
        """Restore the default pagination settings."""
        return await self._reset_setting("pagination")

    async def get_faceting(self) -> Faceting:
        """Get the faceting settings."""
        faceting: Faceting = await self._get_setting("faceting", Faceting)
        return faceting

    async def update_faceting(self, faceting: Faceting) -> TaskInfo:
        """Update the faceting settings."""
        return await self._update_setting(
            "faceting",
            faceting.model_dump(by_alias=True, exclude_unset=True, mode="json"),
            HttpMethod.PATCH,
        )

    async def reset_faceting(self) -> TaskInfo:
        """Restore the default faceting settings."""
        return await self._reset_setting("faceting")
