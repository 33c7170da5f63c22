"""tidyctl - filtered file search and reversible, undoable deletes."""

__version__ = "0.3.0"
