"""
Resource loaders for story detail JSON.

A loader maps a story's resource key (storyTxt, e.g.
"activities/act9d0/level_act9d0_01_beg") to the raw bytes of its detail
JSON, raising ResourceError when it cannot.
"""

import json
import logging
import threading
from pathlib import Path
from typing import Any, Callable

import requests

from story_review.core.errors import ResourceError, SchemaError

logger = logging.getLogger(__name__)

HTTP_TIMEOUT = 30  # seconds per story resource


class FileResourceLoader:
    """Load story resources from `<root>/<key>.json`."""

    def __init__(self, root: Path):
        self.root = Path(root)

    def path_for(self, key: str) -> Path:
        path = (self.root / f"{key}.json").resolve()
        root = self.root.resolve()
        if root not in path.parents:
            raise ResourceError(f"Story resource key escapes {self.root}: {key}", key=key)
        return path

    def load(self, key: str) -> bytes:
        path = self.path_for(key)
        try:
            return path.read_bytes()
        except FileNotFoundError as e:
            raise ResourceError(f"Story resource not found: {path}", key=key) from e
        except OSError as e:
            raise ResourceError(f"Failed to read story resource {path}: {e}", key=key) from e


class HttpResourceLoader:
    """Load story resources from `<base_url>/<key>.json` over HTTP.

    Each thread gets its own session from session_factory, so one loader can
    serve a resolution thread pool.
    """

    def __init__(self, base_url: str, session_factory: Callable[[], requests.Session] = requests.Session,
                 timeout: float = HTTP_TIMEOUT):
        self.base_url = base_url.rstrip('/')
        self.session_factory = session_factory
        self.timeout = timeout
        self._local = threading.local()

    @property
    def session(self) -> requests.Session:
        session = getattr(self._local, 'session', None)
        if session is None:
            session = self._local.session = self.session_factory()
        return session

    def url_for(self, key: str) -> str:
        return f"{self.base_url}/{key.lstrip('/')}.json"

    def load(self, key: str) -> bytes:
        url = self.url_for(key)
        logger.debug(f"Fetching {url}")
        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise ResourceError(f"Failed to fetch story resource {url}: {e}", key=key) from e
        return response.content


def read_json_resource(path: Path) -> Any:
    """Read and decode a JSON file such as story_review_table.json.

    Raises:
        ResourceError: If the file is missing or unreadable
        SchemaError: If the file is not valid UTF-8 JSON
    """
    path = Path(path)
    try:
        with open(path, 'r', encoding='utf-8') as f:
            return json.load(f)
    except FileNotFoundError as e:
        raise ResourceError(f"Resource not found: {path}", key=str(path)) from e
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise SchemaError(f"invalid JSON in {path}: {e}", phase='json') from e
    except OSError as e:
        raise ResourceError(f"Failed to read {path}: {e}", key=str(path)) from e
