"""Review settings inheritance.

A page either carries its own review settings (``custom``), opts out of
review (``disabled``), or inherits them (``inherit``). Inheriting pages
take the settings of the nearest ancestor that is ``custom`` or
``disabled``; when the walk reaches a root page the site-wide defaults
apply.

The resolver is pure: it walks an id-to-page mapping that the caller has
already loaded, so it can run over either the draft or the live stage.
The walk is bounded by ``max_depth`` and fails with ``ConfigurationError``
on cycles instead of looping. On the live stage a parent without a live
version ends the walk like a root page does, so children of an
unpublished page fall back to the site-wide defaults.
"""

from __future__ import annotations

import enum
import uuid
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Literal, Union

from contentreview.database.models.page import LivePage, Page, ReviewMode
from contentreview.database.models.site_config import SiteConfig
from contentreview.exceptions import ConfigurationError

DEFAULT_MAX_DEPTH = 100


class _Disabled(enum.Enum):
    DISABLED = "disabled"

    def __repr__(self) -> str:
        return "DISABLED"


# Sentinel returned when review tracking is switched off for a page
DISABLED = _Disabled.DISABLED

PageNode = Union[Page, LivePage]
EffectiveSettings = Union[Page, LivePage, SiteConfig, Literal[_Disabled.DISABLED]]


def review_mode_of(page: PageNode) -> ReviewMode:
    """Review mode of a page; unsaved pages without a mode inherit."""
    return page.review_mode or ReviewMode.inherit


def resolve_review_settings(
    page: PageNode,
    pages: Mapping[uuid.UUID, PageNode],
    site_config: SiteConfig | None,
    max_depth: int = DEFAULT_MAX_DEPTH,
    missing_parent_is_root: bool = False,
) -> EffectiveSettings:
    """Find the object whose review settings govern ``page``.

    Args:
        page: The page to resolve.
        pages: All pages of the same stage that may appear in the
            ancestor chain, keyed by id.
        site_config: Site-wide default settings, if one exists.
        max_depth: Maximum number of ancestors to visit.
        missing_parent_is_root: Treat a parent absent from ``pages`` as the
            end of the chain. Set for the live stage, where unpublished
            parents are absent.

    Returns:
        The page itself or an ancestor for ``custom`` settings, the site
        config when inheriting from the root, or ``DISABLED``.

    Raises:
        ConfigurationError: On a cycle, a parent missing from ``pages``
            (unless ``missing_parent_is_root``), a walk deeper than
            ``max_depth``, or a missing site config.
    """
    mode = review_mode_of(page)
    if mode is ReviewMode.custom:
        return page
    if mode is ReviewMode.disabled:
        return DISABLED

    page_id = str(page.id)
    seen: set[uuid.UUID] = {page.id}
    current = page

    for _ in range(max_depth):
        parent = pages.get(current.parent_id) if current.parent_id is not None else None
        if current.parent_id is None or (parent is None and missing_parent_is_root):
            if site_config is None:
                raise ConfigurationError("No site-wide review settings exist", page_id)
            return site_config

        if current.parent_id in seen:
            raise ConfigurationError(
                f"Cycle in page hierarchy at {current.parent_id}", page_id
            )

        if parent is None:
            raise ConfigurationError(
                f"Parent page {current.parent_id} is missing", page_id
            )

        parent_mode = review_mode_of(parent)
        if parent_mode is ReviewMode.custom:
            return parent
        if parent_mode is ReviewMode.disabled:
            return DISABLED

        seen.add(parent.id)
        current = parent

    raise ConfigurationError(
        f"Page hierarchy deeper than {max_depth} levels", page_id
    )


@dataclass(frozen=True)
class SettingsOrigin:
    """Where a page's review settings come from, for display.

    Attributes:
        mode: The page's own review mode.
        label: Human readable description, e.g. "Inherited from About us".
        source_page_id: Id of the page the settings come from, if a page.
        from_site_config: True when inherited from the site-wide defaults.
    """

    mode: ReviewMode
    label: str
    source_page_id: uuid.UUID | None = None
    from_site_config: bool = False


def describe_settings_origin(page: PageNode, settings: EffectiveSettings) -> SettingsOrigin:
    """Describe the source of ``page``'s settings for the report."""
    mode = review_mode_of(page)
    if mode is ReviewMode.inherit:
        if isinstance(settings, SiteConfig):
            return SettingsOrigin(mode, "Inherited from Settings", from_site_config=True)
        if settings is not DISABLED:
            return SettingsOrigin(
                mode,
                f"Inherited from {settings.title}",
                source_page_id=settings.id,
            )
    return SettingsOrigin(mode, mode.value.capitalize())
