"""
Story Review Site

Builds a static HTML site from a game's story review dataset.

Packages:
- core: dataset parsing and the content catalog
- site: Jinja2 rendering and the command-line generator
"""

__version__ = "1.0.0"
