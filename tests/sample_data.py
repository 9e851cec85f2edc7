"""
Builders for small story review datasets used across the tests.
"""

import json
from pathlib import Path
from typing import Dict, List, Optional, Tuple


def dialogue_line(line_id: int, content: str, name: Optional[str] = None) -> Dict:
    attributes = {'content': content}
    if name is not None:
        attributes['name'] = name
    return {'id': line_id, 'prop': 'name', 'attributes': attributes}


def decision_line(line_id: int, options: List[str], targets: List[str]) -> Dict:
    return {
        'id': line_id,
        'prop': 'Decision',
        'attributes': {'options': ';'.join(options), 'values': '1;2'},
        'targetLine': {str(i): target for i, target in enumerate(targets)},
    }


def story_detail(name: str, lines: List[Dict], code: Optional[str] = None,
                 tag: str = 'BEG', info: str = 'A short summary.') -> Dict:
    record = {
        'avgTag': tag,
        'storyName': name,
        'storyInfo': info,
        'storyList': lines,
    }
    if code is not None:
        record['storyCode'] = code
    return record


def activity(activity_id: str, name: str, entry_type: str,
             stories: List[Tuple[str, str]], pic: Optional[str] = None) -> Dict:
    """Build an activity record; stories are (storyId, storyTxt) pairs."""
    return {
        'id': activity_id,
        'name': name,
        'entryType': entry_type,
        'storyEntryPicId': pic,
        'infoUnlockDatas': [
            {'storyId': story_id, 'storyCode': None, 'storyTxt': story_txt}
            for story_id, story_txt in stories
        ],
    }


def mainline_dataset() -> Tuple[Dict, Dict[str, Dict]]:
    """One MAINLINE activity with two stories, each a dialogue plus a decision."""
    table = {
        'main_0': activity('main_0', 'Evil Time Part 1', 'MAINLINE', [
            ('main_00_01_beg', 'obt/main/level_main_00-01_beg'),
            ('main_00_01_end', 'obt/main/level_main_00-01_end'),
        ], pic='main_0'),
    }
    details = {
        'obt/main/level_main_00-01_beg': story_detail('Awakening', [
            dialogue_line(1, 'Doctor, can you hear me?', name='Amiya'),
            decision_line(2, ['Yes', 'Where am I?'], ['3', '4']),
        ], code='0-1'),
        'obt/main/level_main_00-01_end': story_detail('Escape', [
            dialogue_line(1, 'We need to move.', name='Ace'),
            decision_line(2, ['Follow', 'Wait'], ['5', '6']),
        ], code='0-1', tag='END'),
    }
    return table, details


def write_dataset(root: Path, table: Dict, details: Dict[str, Dict]) -> Tuple[Path, Path]:
    """Write a dataset in the json/zh_CN layout.

    Returns:
        (table_path, story_dir)
    """
    data_dir = root / 'json' / 'zh_CN'
    story_dir = data_dir / 'gamedata' / 'story'
    story_dir.mkdir(parents=True)

    table_path = data_dir / 'story_review_table.json'
    table_path.write_text(json.dumps(table, ensure_ascii=False), encoding='utf-8')

    for key, record in details.items():
        path = story_dir / f"{key}.json"
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(record, ensure_ascii=False), encoding='utf-8')

    return table_path, story_dir


class DictLoader:
    """In-memory resource loader keyed by storyTxt."""

    def __init__(self, details: Dict[str, Dict]):
        self.details = details
        self.requested = []

    def load(self, key: str) -> bytes:
        from story_review.core.errors import ResourceError

        self.requested.append(key)
        if key not in self.details:
            raise ResourceError(f"Story resource not found: {key}", key=key)
        return json.dumps(self.details[key]).encode('utf-8')
