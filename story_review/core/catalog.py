#!/usr/bin/env python3
"""
Catalog Module

Groups parsed activities by category and attaches each story's detail.

States:
    EMPTY -> ACTIVITIES_LOADED -> DETAILS_RESOLVED

Rendering requires DETAILS_RESOLVED. Detail resolution is fail-fast: the
first story that cannot be loaded or parsed aborts the build.

Usage:
    python3 -m story_review.core.catalog json/zh_CN/story_review_table.json json/zh_CN/gamedata/story
"""

import sys
import logging
import argparse
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple

from story_review.core.errors import BuildError, CatalogStateError
from story_review.core.models import Activity, StoryDetail, StorySummary
from story_review.core.parse_story_detail import parse_story_detail_json
from story_review.core.parse_story_review import parse_story_review_table
from story_review.core.resources import FileResourceLoader, read_json_resource

logger = logging.getLogger(__name__)


class CatalogState(Enum):
    EMPTY = 'empty'
    ACTIVITIES_LOADED = 'activities_loaded'
    DETAILS_RESOLVED = 'details_resolved'


@dataclass
class StoryNavigation:
    """A story with its neighbours inside one activity."""
    story: StorySummary
    position: int
    prev: Optional[StorySummary] = None
    next: Optional[StorySummary] = None


def load_story_detail(loader, story: StorySummary) -> StoryDetail:
    """Fetch and parse the detail resource of one story."""
    logger.debug(f"Resolving story {story.story_id} ({story.story_txt})")
    data = loader.load(story.story_txt)
    return parse_story_detail_json(data, story=story.story_txt)


@dataclass
class Catalog:
    """Activities grouped by category key, in first-seen order."""
    categories: Dict[str, List[Activity]] = field(default_factory=dict)
    state: CatalogState = CatalogState.EMPTY

    def _require_state(self, expected: CatalogState, operation: str) -> None:
        if self.state is not expected:
            raise CatalogStateError(
                f"Cannot {operation}: catalog is {self.state.value}, expected {expected.value}"
            )

    # -------------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------------

    def add_activities(self, activities: List[Activity]) -> 'Catalog':
        """Group activities by category (EMPTY -> ACTIVITIES_LOADED)."""
        self._require_state(CatalogState.EMPTY, 'add activities')

        for activity in activities:
            self.categories.setdefault(activity.category, []).append(activity)

        self.state = CatalogState.ACTIVITIES_LOADED
        return self

    def resolve_details(self, loader, workers: int = 1) -> 'Catalog':
        """Attach every story's detail (ACTIVITIES_LOADED -> DETAILS_RESOLVED).

        Args:
            loader: Object with load(key) -> bytes (see resources.py)
            workers: Number of threads fetching details; 1 runs sequentially

        Raises:
            ResourceError: If a story resource is missing or unreadable
            SchemaError: If a story resource is malformed
        """
        self._require_state(CatalogState.ACTIVITIES_LOADED, 'resolve details')
        stories = [story for _, story in self.iter_stories()]

        if workers <= 1:
            details = [load_story_detail(loader, story) for story in stories]
        else:
            with ThreadPoolExecutor(max_workers=workers) as executor:
                futures = [executor.submit(load_story_detail, loader, story) for story in stories]
                try:
                    # result() in submission order surfaces the first failure in traversal order
                    details = [future.result() for future in futures]
                except BuildError:
                    for future in futures:
                        future.cancel()
                    raise

        for story, detail in zip(stories, details):
            story.detail = detail

        self.state = CatalogState.DETAILS_RESOLVED
        logger.info(f"Resolved {len(stories)} story details")
        return self

    def require_resolved(self) -> 'Catalog':
        self._require_state(CatalogState.DETAILS_RESOLVED, 'render')
        return self

    # -------------------------------------------------------------------------
    # Views
    # -------------------------------------------------------------------------

    def category_keys(self) -> List[str]:
        return list(self.categories.keys())

    def activities(self, category: str) -> List[Activity]:
        return self.categories.get(category, [])

    def all_activities(self) -> List[Activity]:
        return [activity for activities in self.categories.values() for activity in activities]

    def iter_stories(self) -> Iterator[Tuple[Activity, StorySummary]]:
        for activity in self.all_activities():
            for story in activity.stories:
                yield activity, story

    def navigation(self, activity: Activity) -> List[StoryNavigation]:
        """Pair each story of an activity with its previous and next story."""
        stories = activity.stories
        return [
            StoryNavigation(
                story=story,
                position=i,
                prev=stories[i - 1] if i > 0 else None,
                next=stories[i + 1] if i + 1 < len(stories) else None,
            )
            for i, story in enumerate(stories)
        ]

    def stats(self) -> Dict[str, int]:
        stories = [story for _, story in self.iter_stories()]
        return {
            'categories': len(self.categories),
            'activities': len(self.all_activities()),
            'stories': len(stories),
            'lines': sum(len(story.detail.lines) for story in stories),
        }


def build_catalog(table: Any, loader, workers: int = 1) -> Catalog:
    """Build a fully resolved catalog from a decoded story review table.

    Args:
        table: Decoded story_review_table.json
        loader: Story resource loader
        workers: Detail resolution threads

    Returns:
        Catalog in state DETAILS_RESOLVED
    """
    catalog = Catalog()
    catalog.add_activities(parse_story_review_table(table))
    catalog.resolve_details(loader, workers=workers)
    return catalog


def load_catalog(table_path: Path, loader, workers: int = 1) -> Catalog:
    """Read story_review_table.json from disk and build the catalog."""
    return build_catalog(read_json_resource(table_path), loader, workers=workers)


# =============================================================================
# CLI INTERFACE
# =============================================================================

def main():
    """Build the catalog and print a summary per category."""
    parser = argparse.ArgumentParser(description='Build the story catalog and print a summary')
    parser.add_argument('table_json', type=Path, help='Path to story_review_table.json')
    parser.add_argument('story_dir', type=Path, help='Directory holding story detail JSON files')
    parser.add_argument('--workers', type=int, default=1, help='Detail resolution threads (default: 1)')

    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format='%(levelname)s: %(message)s')

    try:
        catalog = load_catalog(args.table_json, FileResourceLoader(args.story_dir), workers=args.workers)
    except BuildError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    for category in catalog.category_keys():
        print(f"{category}:")
        for activity in catalog.activities(category):
            print(f"  {activity.id} {activity.name} ({len(activity.stories)} stories)")

    stats = catalog.stats()
    print(f"✓ {stats['activities']} activities, {stats['stories']} stories, {stats['lines']} lines", file=sys.stderr)


if __name__ == '__main__':
    main()
