"""Pydantic models for index settings.

Every field of :class:`IndexSettings` is optional. A field that was never
set is left out of the PATCH body, so the server keeps its current value.
A field explicitly set to ``None`` is sent as JSON ``null``, which the
server treats as a reset of that one setting. Use ``Index.reset_settings``
(or the per-setting ``reset_*`` calls) to restore defaults explicitly.
"""

from __future__ import annotations

from typing import Any

from pydantic import Field

from meilisearch_tasks.api.models import MeilisearchBaseModel


__all__ = [
    "Faceting",
    "IndexSettings",
    "MinWordSizeForTypos",
    "Pagination",
    "TypoTolerance",
]


class MinWordSizeForTypos(MeilisearchBaseModel):
    """Minimum word lengths before one or two typos are accepted."""

    one_typo: int | None = None
    two_typos: int | None = None


class TypoTolerance(MeilisearchBaseModel):
    """Typo tolerance configuration for an index."""

    enabled: bool | None = None
    min_word_size_for_typos: MinWordSizeForTypos | None = None
    disable_on_words: list[str] | None = None
    disable_on_attributes: list[str] | None = None


class Pagination(MeilisearchBaseModel):
    """Pagination limits for an index."""

    max_total_hits: int | None = Field(default=None, ge=0)


class Faceting(MeilisearchBaseModel):
    """Faceting limits for an index."""

    max_values_per_facet: int | None = Field(default=None, ge=0)


class IndexSettings(MeilisearchBaseModel):
    """All settings of an index, as returned by ``GET /indexes/{uid}/settings``."""

    ranking_rules: list[str] | None = None
    synonyms: dict[str, list[str]] | None = None
    stop_words: list[str] | None = None
    searchable_attributes: list[str] | None = None
    displayed_attributes: list[str] | None = None
    filterable_attributes: list[str] | None = None
    sortable_attributes: list[str] | None = None
    distinct_attribute: str | None = None
    typo_tolerance: TypoTolerance | None = None
    pagination: Pagination | None = None
    faceting: Faceting | None = None

    def to_update_payload(self) -> dict[str, Any]:
        """Serialize only the fields that were explicitly set.

        Returns:
            camelCase JSON-ready dict for ``PATCH /indexes/{uid}/settings``.
        """
        return self.model_dump(by_alias=True, exclude_unset=True, mode="json")
