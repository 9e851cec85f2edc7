"""
Error types raised while building the story catalog.

Every failure aborts the whole build, so callers only need to catch
BuildError at the top level.
"""

from typing import Optional


class BuildError(Exception):
    """Base class for catalog build failures."""


class SchemaError(BuildError):
    """A required field is missing or has the wrong shape.

    Attributes:
        line_id: Script line id, or None when the failure is not tied to a
            line (or the id itself could not be read)
        phase: Decode phase: 'envelope', 'attributes', 'targetLine',
            'story', 'activity' or 'json'
        story: Resource key of the story being decoded, when known
    """

    def __init__(self, message: str, line_id: Optional[int] = None,
                 phase: Optional[str] = None, story: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.line_id = line_id
        self.phase = phase
        self.story = story

    def with_story(self, story: Optional[str]) -> 'SchemaError':
        """Return a copy of this error annotated with the story identity."""
        return SchemaError(self.message, line_id=self.line_id, phase=self.phase, story=story)

    def __str__(self) -> str:
        context = []
        if self.story is not None:
            context.append(f"story {self.story}")
        if self.line_id is not None:
            context.append(f"line {self.line_id}")
        if self.phase is not None:
            context.append(f"phase {self.phase}")
        if not context:
            return self.message
        return f"{self.message} ({', '.join(context)})"


# Decoding failures are schema failures
DecodeError = SchemaError


class ResourceError(BuildError):
    """A story resource could not be found or read."""

    def __init__(self, message: str, key: Optional[str] = None):
        super().__init__(message)
        self.key = key


class CatalogStateError(BuildError):
    """A catalog operation was called in the wrong state."""
