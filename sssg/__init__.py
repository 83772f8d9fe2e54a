"""sssg static site pipeline.

This package turns ``<name>.<kind>.src`` source documents into minified
HTML, CSS and JavaScript artifacts that live next to their sources, and
serves the resulting tree for local preview.

The main entry point is the CLI module, which provides commands for
building, cleaning, watching and serving a project.

Pipeline stages, each in its own module:
- sources: discovery, kind resolution and section parsing
- renderers: markdown to HTML
- templates: flat ``{{name}}`` placeholder substitution
- minifiers: per-kind minification
- build: orchestration of the above plus cleaning
"""

__all__ = ["__version__"]
__version__ = "0.2.0"
