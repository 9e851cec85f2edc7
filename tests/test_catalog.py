#!/usr/bin/env python3
"""
Tests for story_review/core/catalog.py

Tests grouping by category, detail resolution, the catalog state machine
and the navigation views used by the renderer.
"""

import sys
import tempfile
import unittest
from pathlib import Path

# Add repo root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from story_review.core.catalog import Catalog, CatalogState, build_catalog, load_catalog
from story_review.core.errors import CatalogStateError, ResourceError, SchemaError
from story_review.core.models import Decision, Dialogue
from story_review.core.parse_story_review import parse_story_review_table
from story_review.core.resources import FileResourceLoader

from sample_data import (
    DictLoader,
    activity,
    dialogue_line,
    mainline_dataset,
    story_detail,
    write_dataset,
)


def mixed_dataset():
    table = {
        'act1': activity('act1', 'Heart of Surging Flame', 'ACTIVITY', [('a1', 'act/a1'), ('a2', 'act/a2')]),
        'main_0': activity('main_0', 'Prologue', 'MAINLINE', [('m1', 'main/m1')]),
        'act2': activity('act2', 'Code of Brawl', 'ACTIVITY', [('b1', 'act/b1')]),
        'mini1': activity('mini1', 'Stultifera Navis', 'MINI_ACTIVITY', []),
    }
    details = {
        key: story_detail(key, [dialogue_line(1, f"line of {key}")])
        for key in ['act/a1', 'act/a2', 'main/m1', 'act/b1']
    }
    return table, details


class TestCatalogGrouping(unittest.TestCase):
    """Test grouping activities by category."""

    def test_groups_by_category_in_first_seen_order(self):
        table, _ = mixed_dataset()
        catalog = Catalog().add_activities(parse_story_review_table(table))

        self.assertEqual(catalog.category_keys(), ['activity', 'mainline', 'mini_activity'])
        self.assertEqual([a.id for a in catalog.activities('activity')], ['act1', 'act2'])
        self.assertEqual([a.id for a in catalog.activities('mainline')], ['main_0'])
        self.assertEqual(catalog.state, CatalogState.ACTIVITIES_LOADED)

    def test_unknown_category_is_empty(self):
        catalog = Catalog().add_activities([])

        self.assertEqual(catalog.activities('mainline'), [])
        self.assertEqual(catalog.category_keys(), [])

    def test_all_activities_traversal_order(self):
        table, _ = mixed_dataset()
        catalog = Catalog().add_activities(parse_story_review_table(table))

        self.assertEqual([a.id for a in catalog.all_activities()], ['act1', 'act2', 'main_0', 'mini1'])


class TestCatalogStateMachine(unittest.TestCase):
    """Test that transitions cannot skip or repeat states."""

    def test_cannot_resolve_before_loading(self):
        with self.assertRaises(CatalogStateError):
            Catalog().resolve_details(DictLoader({}))

    def test_cannot_load_twice(self):
        catalog = Catalog().add_activities([])
        with self.assertRaises(CatalogStateError):
            catalog.add_activities([])

    def test_require_resolved(self):
        catalog = Catalog()
        with self.assertRaises(CatalogStateError):
            catalog.require_resolved()

        catalog.add_activities([])
        with self.assertRaises(CatalogStateError):
            catalog.require_resolved()

        catalog.resolve_details(DictLoader({}))
        self.assertIs(catalog.require_resolved(), catalog)
        self.assertEqual(catalog.state, CatalogState.DETAILS_RESOLVED)

    def test_failed_resolution_does_not_advance(self):
        table, details = mixed_dataset()
        del details['main/m1']
        catalog = Catalog().add_activities(parse_story_review_table(table))

        with self.assertRaises(ResourceError):
            catalog.resolve_details(DictLoader(details))

        self.assertEqual(catalog.state, CatalogState.ACTIVITIES_LOADED)


class TestResolveDetails(unittest.TestCase):
    """Test attaching story details."""

    def test_attaches_details(self):
        table, details = mixed_dataset()
        catalog = build_catalog(table, DictLoader(details))

        story = catalog.activities('activity')[0].stories[1]
        self.assertEqual(story.detail.story_name, 'act/a2')
        self.assertEqual(story.detail.lines, [Dialogue(id=1, content='line of act/a2')])

    def test_loads_each_story_once_in_traversal_order(self):
        table, details = mixed_dataset()
        loader = DictLoader(details)
        build_catalog(table, loader)

        self.assertEqual(loader.requested, ['act/a1', 'act/a2', 'act/b1', 'main/m1'])

    def test_first_failure_in_traversal_order_wins(self):
        table, details = mixed_dataset()
        details['act/a2'] = {'avgTag': 'x'}
        del details['main/m1']

        for workers in [1, 4]:
            with self.assertRaises(SchemaError) as ctx:
                build_catalog(table, DictLoader(details), workers=workers)
            self.assertEqual(ctx.exception.story, 'act/a2')

    def test_parallel_matches_sequential(self):
        table, details = mixed_dataset()

        sequential = build_catalog(table, DictLoader(details), workers=1)
        parallel = build_catalog(table, DictLoader(details), workers=3)

        self.assertEqual(sequential, parallel)

    def test_idempotent(self):
        table, details = mainline_dataset()

        self.assertEqual(build_catalog(table, DictLoader(details)), build_catalog(table, DictLoader(details)))

    def test_stats(self):
        table, details = mixed_dataset()
        stats = build_catalog(table, DictLoader(details)).stats()

        self.assertEqual(stats, {'categories': 3, 'activities': 4, 'stories': 4, 'lines': 4})


class TestNavigation(unittest.TestCase):
    """Test prev/next neighbours within an activity."""

    def test_navigation_neighbours(self):
        table = {'a': activity('a', 'A', 'ACTIVITY', [('s1', 'x/1'), ('s2', 'x/2'), ('s3', 'x/3')])}
        catalog = Catalog().add_activities(parse_story_review_table(table))
        act = catalog.activities('activity')[0]

        nav = catalog.navigation(act)

        self.assertEqual([n.position for n in nav], [0, 1, 2])
        self.assertIsNone(nav[0].prev)
        self.assertIs(nav[0].next, act.stories[1])
        self.assertIs(nav[1].prev, act.stories[0])
        self.assertIs(nav[1].next, act.stories[2])
        self.assertIs(nav[2].prev, act.stories[1])
        self.assertIsNone(nav[2].next)

    def test_single_story_has_no_neighbours(self):
        table = {'a': activity('a', 'A', 'ACTIVITY', [('s1', 'x/1')])}
        catalog = Catalog().add_activities(parse_story_review_table(table))

        nav = catalog.navigation(catalog.activities('activity')[0])

        self.assertEqual(len(nav), 1)
        self.assertIsNone(nav[0].prev)
        self.assertIsNone(nav[0].next)


def test_mainline_end_to_end():
    """Test the one-activity, two-story mainline scenario from disk."""
    table, details = mainline_dataset()

    with tempfile.TemporaryDirectory() as tmpdir:
        table_path, story_dir = write_dataset(Path(tmpdir), table, details)
        catalog = load_catalog(table_path, FileResourceLoader(story_dir))

    assert catalog.category_keys() == ['mainline']
    activities = catalog.activities('mainline')
    assert len(activities) == 1

    stories = activities[0].stories
    assert [s.story_id for s in stories] == ['main_00_01_beg', 'main_00_01_end']

    nav = catalog.navigation(activities[0])
    assert nav[0].next is stories[1]
    assert nav[1].prev is stories[0]

    for story in stories:
        lines = story.detail.lines
        assert len(lines) == 2
        assert isinstance(lines[0], Dialogue)
        assert isinstance(lines[1], Decision)
        assert len(lines[1].options) == 2

    assert stories[0].detail.lines[1].options == [('Yes', '3'), ('Where am I?', '4')]


def test_missing_entry_type_fails_build():
    """Test that an activity without entryType aborts the build."""
    table, details = mainline_dataset()
    del table['main_0']['entryType']
    loader = DictLoader(details)

    try:
        build_catalog(table, loader)
        assert False, "expected SchemaError"
    except SchemaError as e:
        assert 'entryType' in str(e)

    # Nothing was fetched
    assert loader.requested == []


if __name__ == '__main__':
    import pytest
    pytest.main([__file__, '-v'])
