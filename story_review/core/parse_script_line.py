#!/usr/bin/env python3
"""
Parse Script Line Module

Decodes one raw script line record into a ScriptLine variant.

Decoding is two-phase:
1. Envelope: id, prop, attributes (opaque), targetLine (optional),
   endOfOpt (optional)
2. Attributes: dispatch on `prop` and decode the attribute payload into the
   variant's shape

Unrecognized props become `Other` rather than failing, so new line types in
the dataset never break a build.

Usage:
    python3 -m story_review.core.parse_script_line story.json
"""

import sys
import json
import logging
import argparse
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

from story_review.core.errors import SchemaError
from story_review.core.fields import (
    optional_bool,
    optional_str,
    require_int,
    require_mapping,
    require_present,
    require_str,
)
from story_review.core.models import (
    Background,
    Caption,
    Decision,
    Dialogue,
    Image,
    Other,
    Predicate,
    ScriptLine,
)

logger = logging.getLogger(__name__)

OPTION_SEPARATOR = ';'


# =============================================================================
# ENVELOPE
# =============================================================================

@dataclass
class LineEnvelope:
    """Generic fields shared by every script line."""
    id: int
    prop: str
    attributes: Any
    target_line: Any = None
    end_of_opt: Optional[bool] = None


def parse_envelope(record: Any) -> LineEnvelope:
    """Decode the generic part of a script line record.

    Raises:
        SchemaError: phase 'envelope'. line_id is set once `id` is readable.
    """
    record = require_mapping(record, 'script line', phase='envelope')
    line_id = require_int(record, 'id', phase='envelope')
    context = {'line_id': line_id, 'phase': 'envelope'}

    return LineEnvelope(
        id=line_id,
        prop=require_str(record, 'prop', **context),
        attributes=require_present(record, 'attributes', **context),
        target_line=record.get('targetLine'),
        end_of_opt=optional_bool(record, 'endOfOpt', **context),
    )


# =============================================================================
# ATTRIBUTE DECODERS
# =============================================================================

def _attributes(envelope: LineEnvelope) -> Tuple[Dict[str, Any], Dict[str, Any]]:
    context = {'line_id': envelope.id, 'phase': 'attributes'}
    attrs = require_mapping(envelope.attributes, f"{envelope.prop} attributes", **context)
    return attrs, context


def decode_image(envelope: LineEnvelope) -> Image:
    attrs, context = _attributes(envelope)
    return Image(id=envelope.id, image=optional_str(attrs, 'image', **context))


def decode_background(envelope: LineEnvelope) -> Background:
    attrs, context = _attributes(envelope)
    return Background(id=envelope.id, image=optional_str(attrs, 'image', **context))


def decode_dialogue(envelope: LineEnvelope) -> Dialogue:
    attrs, context = _attributes(envelope)
    return Dialogue(
        id=envelope.id,
        content=require_str(attrs, 'content', **context),
        speaker=optional_str(attrs, 'name', **context),
    )


def decode_caption(envelope: LineEnvelope) -> Caption:
    attrs, context = _attributes(envelope)
    return Caption(id=envelope.id, text=optional_str(attrs, 'text', **context))


def decode_predicate(envelope: LineEnvelope) -> Predicate:
    attrs, context = _attributes(envelope)
    end_of_opt = envelope.end_of_opt if envelope.end_of_opt is not None else False
    return Predicate(
        id=envelope.id,
        references=require_str(attrs, 'references', **context),
        end_of_opt=end_of_opt,
    )


def extract_target_lines(envelope: LineEnvelope) -> List[str]:
    """Return targetLine values as an ordered list.

    The keys of the targetLine object carry no meaning; only the order of its
    values (document order) pairs them with the option labels.
    """
    context = {'line_id': envelope.id, 'phase': 'targetLine'}
    if envelope.target_line is None:
        raise SchemaError("Decision line has no 'targetLine'", **context)
    mapping = require_mapping(envelope.target_line, 'targetLine', **context)

    targets = []
    for key, value in mapping.items():
        if not isinstance(value, str):
            raise SchemaError(f"targetLine '{key}': expected string target line id", **context)
        targets.append(value)
    return targets


def decode_decision(envelope: LineEnvelope) -> Decision:
    """Zip the `;`-separated option labels with the targetLine values.

    Pairs are formed by position and truncated to the shorter list.
    """
    targets = extract_target_lines(envelope)
    attrs, context = _attributes(envelope)
    labels = require_str(attrs, 'options', **context).split(OPTION_SEPARATOR)

    if len(labels) != len(targets):
        logger.warning(
            f"Decision line {envelope.id}: {len(labels)} options vs "
            f"{len(targets)} target lines, keeping {min(len(labels), len(targets))} pairs"
        )

    return Decision(id=envelope.id, options=list(zip(labels, targets)))


LINE_DECODERS: Dict[str, Callable[[LineEnvelope], ScriptLine]] = {
    'Image': decode_image,
    'Background': decode_background,
    'name': decode_dialogue,
    'Sticker': decode_caption,
    'Subtitle': decode_caption,
    'Decision': decode_decision,
    'Predicate': decode_predicate,
}


# =============================================================================
# MAIN PARSER FUNCTION
# =============================================================================

def parse_script_line(record: Any) -> ScriptLine:
    """Decode one raw script line record.

    Args:
        record: Decoded JSON object with at least id, prop and attributes

    Returns:
        The ScriptLine variant selected by `prop`; `Other` for unknown props

    Raises:
        SchemaError: If the envelope or the variant's attributes are malformed
    """
    envelope = parse_envelope(record)
    decoder = LINE_DECODERS.get(envelope.prop)
    if decoder is None:
        return Other(id=envelope.id)
    return decoder(envelope)


# =============================================================================
# CLI INTERFACE
# =============================================================================

def main():
    """Print the decoded lines of a story JSON file."""
    parser = argparse.ArgumentParser(description='Decode the script lines of a story JSON file')
    parser.add_argument('story_json', type=Path, help='Path to a story detail JSON file')

    args = parser.parse_args()

    if not args.story_json.exists():
        print(f"Error: Input file not found: {args.story_json}", file=sys.stderr)
        sys.exit(1)

    with open(args.story_json, 'r', encoding='utf-8') as f:
        story = json.load(f)

    try:
        for record in story.get('storyList', []):
            print(parse_script_line(record))
    except SchemaError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == '__main__':
    main()
