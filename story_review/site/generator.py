#!/usr/bin/env python3
"""
Story Review Site Generator

Builds the static story review site from the game dataset.

Pipeline:
- Stage 1: Parse story_review_table.json into activities, grouped by category
- Stage 2: Resolve every story's detail JSON (disk or HTTP)
- Stage 3: Render index, category, activity and story pages

The catalog is fully resolved before the output directory is touched; any
missing or malformed resource aborts the build with no output written.
"""

import sys
import logging
import argparse
from pathlib import Path

from story_review.core.catalog import Catalog
from story_review.core.errors import BuildError
from story_review.core.parse_story_review import parse_story_review_table
from story_review.core.resources import (
    HTTP_TIMEOUT,
    FileResourceLoader,
    HttpResourceLoader,
    read_json_resource,
)
from story_review.site.html_generator import (
    STATIC_DIR,
    TEMPLATE_DIR,
    check_output_dir,
    generate_site,
)

DEFAULT_DATA_DIR = Path('json/zh_CN')
DEFAULT_OUTPUT_DIR = Path('out')


def banner(title: str) -> None:
    print("\n" + "=" * 80, file=sys.stderr)
    print(title, file=sys.stderr)
    print("=" * 80, file=sys.stderr)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Story Review Site Generator - render the story dataset as static HTML'
    )
    parser.add_argument('--data-dir', type=Path, default=DEFAULT_DATA_DIR,
                        help='Dataset root (default: json/zh_CN)')
    parser.add_argument('--table', type=Path,
                        help='Path to story_review_table.json (default: <data-dir>/story_review_table.json)')
    parser.add_argument('--story-dir', type=Path,
                        help='Story detail directory (default: <data-dir>/gamedata/story)')
    parser.add_argument('--base-url',
                        help='Fetch story details from <base-url>/<storyTxt>.json instead of --story-dir')
    parser.add_argument('--timeout', type=float, default=HTTP_TIMEOUT,
                        help=f'HTTP timeout in seconds for --base-url (default: {HTTP_TIMEOUT})')
    parser.add_argument('--output', type=Path, default=DEFAULT_OUTPUT_DIR,
                        help='Output directory, replaced on success (default: out)')
    parser.add_argument('--static-dir', type=Path, default=STATIC_DIR,
                        help='Assets copied to the output root')
    parser.add_argument('--templates', type=Path, default=TEMPLATE_DIR,
                        help='Jinja2 template directory')
    parser.add_argument('--workers', type=int, default=1,
                        help='Threads used to resolve story details (default: 1)')
    parser.add_argument('-v', '--verbose', action='store_true', help='Enable debug logging')
    return parser


def story_dir_for(args) -> Path:
    return args.story_dir or args.data_dir / 'gamedata' / 'story'


def create_loader(args):
    if args.base_url:
        return HttpResourceLoader(args.base_url, timeout=args.timeout)
    return FileResourceLoader(story_dir_for(args))


def main(argv=None) -> int:
    """Main entry point for the site generator."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s'
    )

    table_path = args.table or args.data_dir / 'story_review_table.json'
    inputs = [table_path, args.templates, args.static_dir]
    if not args.base_url:
        inputs.append(story_dir_for(args))

    try:
        check_output_dir(args.output, inputs)

        # ===================================================================
        # STAGE 1: PARSE ACTIVITIES
        # ===================================================================
        banner(f"STAGE 1: PARSE ACTIVITIES - Reading {table_path}")

        catalog = Catalog()
        catalog.add_activities(parse_story_review_table(read_json_resource(table_path)))
        for category in catalog.category_keys():
            print(f"  {category}: {len(catalog.activities(category))} activities", file=sys.stderr)

        # ===================================================================
        # STAGE 2: RESOLVE STORY DETAILS
        # ===================================================================
        loader = create_loader(args)
        source = args.base_url or loader.root
        banner(f"STAGE 2: RESOLVE STORY DETAILS - Loading from {source}")

        catalog.resolve_details(loader, workers=args.workers)
        stats = catalog.stats()
        print(f"✓ {stats['stories']} stories, {stats['lines']} script lines", file=sys.stderr)

        # ===================================================================
        # STAGE 3: GENERATE HTML
        # ===================================================================
        banner(f"STAGE 3: GENERATE HTML - Writing {args.output}")

        result = generate_site(catalog, args.output, template_dir=args.templates,
                               static_dir=args.static_dir, protected=inputs)

        # ===================================================================
        # COMPLETE
        # ===================================================================
        banner("=== STORY REVIEW SITE GENERATION COMPLETE ===")
        print(f"Pages: {result['pages']}", file=sys.stderr)
        print(f"Assets: {result['assets']}", file=sys.stderr)
        print(f"Output: {args.output}", file=sys.stderr)
        print("=" * 80 + "\n", file=sys.stderr)

        return 0

    except BuildError as e:
        print(f"\n❌ Build failed: {e}", file=sys.stderr)
        print("No output was written.", file=sys.stderr)
        return 1

    except Exception as e:
        print(f"\n❌ Unexpected error: {e}", file=sys.stderr)
        import traceback
        traceback.print_exc()
        return 1


if __name__ == '__main__':
    sys.exit(main())
