"""Load Markdown books from a SUMMARY.md outline and plan their preprocessors and renderers."""

__version__ = "0.1.0"