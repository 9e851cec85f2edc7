"""
Parse Story Detail Module

Decodes a story's detail resource (gamedata/story/<key>.json) into a
StoryDetail: metadata plus the ordered script lines.
"""

import json
from typing import Any, Optional, Union

from story_review.core.errors import SchemaError
from story_review.core.fields import optional_str, require_list, require_mapping, require_str
from story_review.core.models import StoryDetail
from story_review.core.parse_script_line import parse_script_line


def parse_story_detail(record: Any, story: Optional[str] = None) -> StoryDetail:
    """Decode a story detail record.

    Args:
        record: Decoded JSON object with avgTag, storyName, storyInfo, storyList
        story: Resource key used to annotate errors

    Returns:
        StoryDetail with lines in the same order as `storyList`

    Raises:
        SchemaError: If a field or any script line is malformed
    """
    try:
        record = require_mapping(record, 'story detail', phase='story')
        context = {'phase': 'story'}

        return StoryDetail(
            story_code=optional_str(record, 'storyCode', **context),
            avg_tag=require_str(record, 'avgTag', **context),
            story_name=require_str(record, 'storyName', **context),
            story_info=require_str(record, 'storyInfo', **context),
            lines=[parse_script_line(line) for line in require_list(record, 'storyList', **context)],
        )
    except SchemaError as e:
        if story is None or e.story is not None:
            raise
        raise e.with_story(story) from e


def parse_story_detail_json(data: Union[str, bytes], story: Optional[str] = None) -> StoryDetail:
    """Decode raw JSON text of a story detail resource."""
    try:
        record = json.loads(data)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise SchemaError(f"invalid JSON: {e}", phase='json', story=story) from e
    return parse_story_detail(record, story=story)
