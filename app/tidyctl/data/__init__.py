"""Data files bundled with tidyctl."""
