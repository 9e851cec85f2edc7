"""
Core Library for Story Review Processing

This library parses the story review dataset into typed objects and groups
them into a catalog ready for rendering.

Modules:
- parse_script_line: Decode one raw script line into a ScriptLine variant
- parse_story_detail: Decode a story's metadata and script lines
- parse_story_review: Decode activities (story reviews) and their story summaries
- catalog: Group activities by category and attach story details
- resources: Load secondary story resources from disk or HTTP
"""

from story_review.core.errors import (
    BuildError,
    CatalogStateError,
    DecodeError,
    ResourceError,
    SchemaError,
)
from story_review.core.catalog import Catalog, CatalogState, StoryNavigation, build_catalog, load_catalog

__all__ = [
    'BuildError',
    'Catalog',
    'CatalogState',
    'CatalogStateError',
    'DecodeError',
    'ResourceError',
    'SchemaError',
    'StoryNavigation',
    'build_catalog',
    'load_catalog',
]
