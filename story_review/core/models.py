"""
Data model for the story review dataset.

Activities (story reviews) own ordered story summaries; each summary gets its
StoryDetail attached once the catalog resolves it. Script lines form a closed
set of variants, each carrying the source line id and a `kind` tag that
templates switch on.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, List, Optional, Tuple, Union

logger = logging.getLogger(__name__)


class EntryType(Enum):
    """Activity category. The value is the category key used in output paths."""
    ACTIVITY = 'activity'
    MINI_ACTIVITY = 'mini_activity'
    MAINLINE = 'mainline'
    NONE = 'none'

    @classmethod
    def from_tag(cls, tag: str) -> 'EntryType':
        """Map a raw `entryType` string to a category, falling back to NONE."""
        try:
            return cls[tag]
        except KeyError:
            logger.warning(f"Unknown entry type '{tag}', filing under '{cls.NONE.value}'")
            return cls.NONE


# =============================================================================
# SCRIPT LINES
# =============================================================================

@dataclass
class Dialogue:
    id: int
    content: str
    speaker: Optional[str] = None
    kind: ClassVar[str] = 'dialogue'


@dataclass
class Caption:
    """On-screen text; decoded from both `Sticker` and `Subtitle` lines."""
    id: int
    text: Optional[str] = None
    kind: ClassVar[str] = 'caption'


@dataclass
class Background:
    id: int
    image: Optional[str] = None
    kind: ClassVar[str] = 'background'


@dataclass
class Image:
    id: int
    image: Optional[str] = None
    kind: ClassVar[str] = 'image'


@dataclass
class Decision:
    """Branch point: (option label, target line id) pairs in display order."""
    id: int
    options: List[Tuple[str, str]] = field(default_factory=list)
    kind: ClassVar[str] = 'decision'


@dataclass
class Predicate:
    """Branch guard referencing decision options; end_of_opt closes a branch."""
    id: int
    references: str
    end_of_opt: bool = False
    kind: ClassVar[str] = 'predicate'


@dataclass
class Other:
    """Any unrecognized line. Only the id is kept so positions stay intact."""
    id: int
    kind: ClassVar[str] = 'other'


ScriptLine = Union[Dialogue, Caption, Background, Image, Decision, Predicate, Other]


# =============================================================================
# STORIES AND ACTIVITIES
# =============================================================================

@dataclass
class StoryDetail:
    story_code: Optional[str] = None
    avg_tag: str = ''
    story_name: str = ''
    story_info: str = ''
    lines: List[ScriptLine] = field(default_factory=list)


@dataclass
class StorySummary:
    """One story inside an activity.

    `story_txt` is the resource key: it locates the story's detail JSON and
    doubles as the output file slug.
    """
    story_id: str
    story_txt: str
    story_code: Optional[str] = None
    detail: StoryDetail = field(default_factory=StoryDetail)


@dataclass
class Activity:
    """A story review: named group of stories. `category` is the EntryType key of `entry_type`."""
    id: str
    name: str
    entry_type: str
    category: str
    cover_image: Optional[str] = None
    stories: List[StorySummary] = field(default_factory=list)
