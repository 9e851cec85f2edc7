"""
Static site generation for the story review dataset.

Modules:
- html_generator: Render a resolved catalog with Jinja2 templates
- generator: Command-line pipeline (parse, resolve, render)
"""
