"""
Parse Story Review Module

Decodes the story review table (story_review_table.json) into Activity
objects. Story details are not resolved here; see catalog.py.
"""

import logging
from typing import Any, List

from story_review.core.errors import SchemaError
from story_review.core.fields import optional_str, require_list, require_mapping, require_str
from story_review.core.models import Activity, EntryType, StorySummary

logger = logging.getLogger(__name__)


def parse_story_summary(record: Any, activity_id: str, position: int) -> StorySummary:
    """Decode one entry of an activity's infoUnlockDatas."""
    what = f"activity {activity_id} story #{position}"
    record = require_mapping(record, what, phase='activity')
    context = {'phase': 'activity'}

    try:
        return StorySummary(
            story_id=require_str(record, 'storyId', **context),
            story_code=optional_str(record, 'storyCode', **context),
            story_txt=require_str(record, 'storyTxt', **context),
        )
    except SchemaError as e:
        raise SchemaError(f"{what}: {e.message}", phase='activity') from e


def parse_story_review(record: Any) -> Activity:
    """Decode one activity record.

    Args:
        record: Decoded JSON object with id, name, entryType, infoUnlockDatas

    Returns:
        Activity with its story summaries in source order

    Raises:
        SchemaError: If a required field or a story summary is malformed
    """
    record = require_mapping(record, 'activity', phase='activity')
    context = {'phase': 'activity'}

    activity_id = require_str(record, 'id', **context)
    try:
        name = require_str(record, 'name', **context)
        entry_type = require_str(record, 'entryType', **context)
        cover_image = optional_str(record, 'storyEntryPicId', **context)
        raw_stories = require_list(record, 'infoUnlockDatas', **context)
    except SchemaError as e:
        raise SchemaError(f"activity {activity_id}: {e.message}", phase='activity') from e

    stories = [
        parse_story_summary(story, activity_id, position)
        for position, story in enumerate(raw_stories)
    ]

    return Activity(
        id=activity_id,
        name=name,
        entry_type=entry_type,
        category=EntryType.from_tag(entry_type).value,
        cover_image=cover_image,
        stories=stories,
    )


def parse_story_review_table(record: Any) -> List[Activity]:
    """Decode the whole story review table.

    The table is a JSON object keyed by activity id; only the values are used,
    in document order.
    """
    table = require_mapping(record, 'story review table', phase='activity')

    activities = []
    for raw_activity in table.values():
        activity = parse_story_review(raw_activity)
        logger.debug(f"Parsed activity {activity.id}: {activity.name} ({len(activity.stories)} stories)")
        activities.append(activity)

    logger.info(f"Parsed {len(activities)} activities")
    return activities
