"""Filtered, cancellable filesystem search.

This package provides the search request and result models, the filter
predicates evaluated against entry metadata, and the concurrent search
engine that streams matches back to a consumer.
"""

from tidyctl.search.engine import SearchEngine, SearchJob, SearchStream
from tidyctl.search.filters import (
    CommentFilter,
    CommentMode,
    DateFilter,
    DateMode,
    ExtensionFilter,
    ExtensionMode,
    FilterPredicate,
    InvalidFilterError,
    KindFilter,
    NameFilter,
    NameMode,
    SizeFilter,
    SizeMode,
    TagFilter,
    TagMode,
    matches,
    matches_all,
    parse_filter,
)
from tidyctl.search.metadata import (
    MetadataProvider,
    NullMetadataProvider,
    XattrMetadataProvider,
    measure_size,
)
from tidyctl.search.models import FileKind, FileMetadata, SearchRequest, SearchResult, SearchType

__all__ = [
    "CommentFilter",
    "CommentMode",
    "DateFilter",
    "DateMode",
    "ExtensionFilter",
    "ExtensionMode",
    "FileKind",
    "FileMetadata",
    "FilterPredicate",
    "InvalidFilterError",
    "KindFilter",
    "MetadataProvider",
    "NameFilter",
    "NameMode",
    "NullMetadataProvider",
    "SearchEngine",
    "SearchJob",
    "SearchRequest",
    "SearchResult",
    "SearchStream",
    "SearchType",
    "SizeFilter",
    "SizeMode",
    "TagFilter",
    "TagMode",
    "XattrMetadataProvider",
    "matches",
    "matches_all",
    "measure_size",
    "parse_filter",
]
