"""Chapter rating browser: paged rating grids, color legends and trend charts."""

__version__ = "0.1.0"
