#!/usr/bin/env python3
"""
HTML Generator Module

Renders a resolved catalog into the static site.

Input:
    - Catalog in state DETAILS_RESOLVED

Output:
    - out/index.html
    - out/cat/<category>.html
    - out/act/<activity id>.html
    - out/<storyTxt>.html
    - static assets copied to out/

Responsibilities:
    - Load Jinja2 templates
    - Compute per-page navigation (categories, siblings, prev/next)
    - Replace the dataset's literal "\\n" markers with <br />
    - Copy static assets
"""

import sys
import shutil
import logging
import tempfile
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from jinja2 import Environment, FileSystemLoader, TemplateError

from story_review.core.catalog import Catalog
from story_review.core.errors import BuildError
from story_review.core.models import Activity

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).parent / 'templates'
STATIC_DIR = Path(__file__).parent / 'static'

CATEGORY_TITLES = {
    'mainline': 'Main Theme',
    'activity': 'Side Stories',
    'mini_activity': 'Vignettes',
    'none': 'Other Records',
}

LEADER_LINE_SCRIPT = 'leader-line.min.js'


def relative_root(page_path: str) -> str:
    """Prefix that leads from a page back to the output root.

    Args:
        page_path: Page path relative to the output root, e.g. "act/act9d0.html"

    Returns:
        "" for root pages, "../" per directory level otherwise
    """
    return '../' * page_path.count('/')


def format_line_breaks(html: str) -> str:
    """Replace the literal backslash-n sequences used by the dataset."""
    return html.replace('\\n', '<br />')


def category_title(category: str) -> str:
    return CATEGORY_TITLES.get(category, category)


def create_environment(template_dir: Path = TEMPLATE_DIR) -> Environment:
    """Create the Jinja2 environment for the site templates.

    Raises:
        FileNotFoundError: If the template directory does not exist
    """
    if not template_dir.exists():
        raise FileNotFoundError(f"Template directory not found: {template_dir}")

    env = Environment(loader=FileSystemLoader(str(template_dir)))
    env.filters['category_title'] = category_title
    env.globals['leader_line_script'] = LEADER_LINE_SCRIPT
    return env


class SiteRenderer:
    """Writes the pages of one catalog into an output directory."""

    def __init__(self, catalog: Catalog, output_dir: Path, env: Environment,
                 static_files: Optional[List[str]] = None):
        self.catalog = catalog
        self.output_dir = output_dir
        self.env = env
        self.categories = catalog.category_keys()
        self.static_files = static_files or []
        self.pages_written = 0

    def render(self, template_name: str, page_path: str, **context) -> str:
        try:
            template = self.env.get_template(template_name)
            html = template.render(
                categories=self.categories,
                root=relative_root(page_path),
                static_files=self.static_files,
                **context
            )
        except TemplateError as e:
            raise RuntimeError(f"Failed to render template {template_name} for {page_path}: {e}") from e
        return format_line_breaks(html)

    def write(self, page_path: str, html: str) -> Path:
        path = self.output_dir / page_path
        if self.output_dir.resolve() not in path.resolve().parents:
            raise RuntimeError(f"Page path escapes the output directory: {page_path}")
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w', encoding='utf-8') as f:
            f.write(html)
        self.pages_written += 1
        return path

    def generate_index(self) -> None:
        page = 'index.html'
        self.write(page, self.render('index.html.jinja2', page, catalog=self.catalog))

    def generate_category(self, category: str) -> None:
        page = f"cat/{category}.html"
        self.write(page, self.render(
            'category.html.jinja2', page,
            category=category,
            activities=self.catalog.activities(category),
        ))

    def generate_activity(self, activity: Activity) -> None:
        page = f"act/{activity.id}.html"
        self.write(page, self.render(
            'activity.html.jinja2', page,
            category=activity.category,
            activities=self.catalog.activities(activity.category),
            activity=activity,
        ))

    def generate_stories(self, activity: Activity) -> None:
        activities = self.catalog.activities(activity.category)
        for nav in self.catalog.navigation(activity):
            page = f"{nav.story.story_txt}.html"
            self.write(page, self.render(
                'story.html.jinja2', page,
                category=activity.category,
                activities=activities,
                activity=activity,
                stories=activity.stories,
                story=nav.story,
                prev=nav.prev,
                next=nav.next,
            ))

    def generate_all(self) -> int:
        self.generate_index()
        for category in self.categories:
            self.generate_category(category)
            for activity in self.catalog.activities(category):
                self.generate_activity(activity)
                self.generate_stories(activity)
        return self.pages_written


def copy_static(static_dir: Path, output_dir: Path) -> List[str]:
    """Copy every file of static_dir into output_dir.

    Returns:
        Relative paths of the copied files
    """
    copied = []
    if not static_dir.exists():
        logger.warning(f"Static directory not found, skipping assets: {static_dir}")
        return copied

    for source in sorted(static_dir.rglob('*')):
        if not source.is_file():
            continue
        relative = source.relative_to(static_dir).as_posix()
        target = output_dir / relative
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(source, target)
        copied.append(relative)

    return copied


def check_output_dir(output_dir: Path, protected: Iterable[Path] = ()) -> None:
    """Refuse an output directory whose removal would destroy other files.

    The output directory is deleted wholesale when a build is swapped in, so
    it must not be the working directory or one of its ancestors, and must not
    be or contain any of the protected paths (dataset, templates, assets).

    Raises:
        BuildError: If output_dir overlaps the working directory or a protected path
    """
    output = Path(output_dir).resolve()
    cwd = Path.cwd().resolve()
    if output == cwd or output in cwd.parents:
        raise BuildError(f"Refusing to use {output_dir} as output: it contains the working directory")

    for path in protected:
        if path is None:
            continue
        resolved = Path(path).resolve()
        if resolved == output or output in resolved.parents:
            raise BuildError(f"Refusing to use {output_dir} as output: it contains {path}")


def replace_output_dir(staging_dir: Path, output_dir: Path) -> None:
    """Swap a finished build into place, removing the previous one."""
    if output_dir.exists():
        shutil.rmtree(output_dir)
    staging_dir.rename(output_dir)


def generate_site(catalog: Catalog, output_dir: Path, template_dir: Path = TEMPLATE_DIR,
                  static_dir: Path = STATIC_DIR, protected: Iterable[Path] = ()) -> Dict[str, int]:
    """Render the whole site for a resolved catalog.

    Pages are written to a staging directory next to output_dir and swapped
    in only after every page rendered, so a failed build leaves the previous
    output untouched.

    Args:
        catalog: Catalog in state DETAILS_RESOLVED
        output_dir: Directory to (re)create
        template_dir: Jinja2 template directory
        static_dir: Assets copied verbatim to the output root
        protected: Input paths the output directory must not contain

    Returns:
        Dict with 'pages' and 'assets' counts

    Raises:
        CatalogStateError: If the catalog is not resolved
        BuildError: If output_dir would overwrite the working directory or an input
        FileNotFoundError: If the template directory is missing
        RuntimeError: If rendering fails
    """
    catalog.require_resolved()
    check_output_dir(output_dir, [template_dir, static_dir, *protected])
    env = create_environment(template_dir)

    print("\nGenerating HTML output...", file=sys.stderr)
    output_dir.parent.mkdir(parents=True, exist_ok=True)
    staging_dir = Path(tempfile.mkdtemp(prefix=f".{output_dir.name}-", dir=output_dir.parent))
    staging_dir.chmod(0o755)

    try:
        assets = copy_static(static_dir, staging_dir)
        renderer = SiteRenderer(catalog, staging_dir, env, static_files=assets)
        pages = renderer.generate_all()
    except Exception:
        shutil.rmtree(staging_dir, ignore_errors=True)
        raise

    replace_output_dir(staging_dir, output_dir)

    logger.info(f"Wrote {pages} pages and {len(assets)} assets to {output_dir}")
    return {'pages': pages, 'assets': len(assets)}
