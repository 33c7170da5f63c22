"""Filter predicates for searches.

Each predicate kind is a small immutable dataclass that validates itself
on construction and evaluates against one FileMetadata. A malformed
predicate (a ``between`` filter without its upper bound, an invalid
regex, ...) raises InvalidFilterError when it is built, so evaluation is
total: ``matches()`` returns a boolean for every well-formed predicate and
every metadata value, never raises.

Predicates of a request are combined with logical AND.
"""

import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import TypeVar

from tidyctl.core import units
from tidyctl.core.units import format_size
from tidyctl.search.models import FileKind, FileMetadata


class InvalidFilterError(ValueError):
    """Raised when a filter predicate is malformed."""


def _fold(value: str, case_sensitive: bool) -> str:
    return value if case_sensitive else value.casefold()


def _normalize_set(values: Iterable[str], *, strip_dots: bool = False) -> frozenset[str]:
    """Trim, case-fold and de-duplicate a set of filter values."""
    result: set[str] = set()
    for value in values:
        item = value.strip()
        if strip_dots:
            item = item.lstrip(".")
        if item:
            result.add(item.casefold())
    return frozenset(result)


# =============================================================================
# Name
# =============================================================================


class NameMode(str, Enum):
    """Comparison applied by a NameFilter."""

    CONTAINS = "contains"
    NOT_CONTAINS = "not_contains"
    STARTS_WITH = "starts_with"
    ENDS_WITH = "ends_with"
    EQUALS = "equals"
    REGEX = "regex"


@dataclass(frozen=True, slots=True)
class NameFilter:
    """Match on the entry's base name.

    Attributes:
        mode: Comparison to apply.
        value: Text (or regular expression for REGEX mode).
    """

    mode: NameMode
    value: str
    _pattern: re.Pattern[str] | None = field(default=None, init=False, repr=False, compare=False)
    _folded_pattern: re.Pattern[str] | None = field(
        default=None, init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        """Validate the filter and precompile regular expressions."""
        if self.mode != NameMode.REGEX and not self.value:
            msg = f"Name filter '{self.mode.value}' needs a non-empty value"
            raise InvalidFilterError(msg)
        if self.mode == NameMode.REGEX:
            try:
                object.__setattr__(self, "_pattern", re.compile(self.value))
                object.__setattr__(self, "_folded_pattern", re.compile(self.value, re.IGNORECASE))
            except re.error as e:
                msg = f"Invalid name regex '{self.value}': {e}"
                raise InvalidFilterError(msg) from e

    def matches(self, metadata: FileMetadata, case_sensitive: bool) -> bool:
        if self.mode == NameMode.REGEX:
            pattern = self._pattern if case_sensitive else self._folded_pattern
            return pattern is not None and pattern.search(metadata.name) is not None

        name = _fold(metadata.name, case_sensitive)
        value = _fold(self.value, case_sensitive)
        if self.mode == NameMode.CONTAINS:
            return value in name
        if self.mode == NameMode.NOT_CONTAINS:
            return value not in name
        if self.mode == NameMode.STARTS_WITH:
            return name.startswith(value)
        if self.mode == NameMode.ENDS_WITH:
            return name.endswith(value)
        return name == value

    def describe(self) -> str:
        return f"Name {self.mode.value.replace('_', ' ')}: {self.value}"


# =============================================================================
# Extension
# =============================================================================


class ExtensionMode(str, Enum):
    """Membership test applied by an ExtensionFilter."""

    INCLUDES = "includes"
    EXCLUDES = "excludes"


@dataclass(frozen=True, slots=True)
class ExtensionFilter:
    """Match on the entry's extension, always case-insensitively.

    Attributes:
        mode: INCLUDES or EXCLUDES.
        values: Extensions, with or without a leading dot.
    """

    mode: ExtensionMode
    values: frozenset[str]

    def __post_init__(self) -> None:
        """Normalize the extension set and reject empty sets."""
        normalized = _normalize_set(self.values, strip_dots=True)
        if not normalized:
            msg = "Extension filter needs at least one extension"
            raise InvalidFilterError(msg)
        object.__setattr__(self, "values", normalized)

    def matches(self, metadata: FileMetadata, case_sensitive: bool) -> bool:
        _ = case_sensitive  # Extensions compare case-insensitively by definition
        found = metadata.extension.casefold() in self.values
        return found if self.mode == ExtensionMode.INCLUDES else not found

    def describe(self) -> str:
        verb = "is" if self.mode == ExtensionMode.INCLUDES else "is not"
        return f"Extension {verb}: {', '.join(sorted(self.values))}"


# =============================================================================
# Size
# =============================================================================


class SizeMode(str, Enum):
    """Comparison applied by a SizeFilter."""

    GREATER_THAN = "greater_than"
    LESS_THAN = "less_than"
    BETWEEN = "between"
    EQUALS = "equals"


@dataclass(frozen=True, slots=True)
class SizeFilter:
    """Match on the entry size in bytes (directories count as 0).

    Attributes:
        mode: Comparison to apply.
        bytes: Reference size (lower bound for BETWEEN).
        bytes_max: Inclusive upper bound, required for BETWEEN.
    """

    mode: SizeMode
    bytes: int
    bytes_max: int | None = None

    def __post_init__(self) -> None:
        """Validate bounds."""
        if self.bytes < 0:
            msg = f"Size filter bound cannot be negative, got {self.bytes}"
            raise InvalidFilterError(msg)
        if self.mode == SizeMode.BETWEEN:
            if self.bytes_max is None:
                msg = "Size filter 'between' requires an upper bound"
                raise InvalidFilterError(msg)
            if self.bytes_max < self.bytes:
                msg = f"Size filter upper bound {self.bytes_max} is below lower bound {self.bytes}"
                raise InvalidFilterError(msg)

    def matches(self, metadata: FileMetadata, case_sensitive: bool) -> bool:
        size = metadata.size
        if self.mode == SizeMode.GREATER_THAN:
            return size > self.bytes
        if self.mode == SizeMode.LESS_THAN:
            return size < self.bytes
        if self.mode == SizeMode.EQUALS:
            return size == self.bytes
        if self.bytes_max is None:
            return False
        return self.bytes <= size <= self.bytes_max

    def describe(self) -> str:
        if self.mode == SizeMode.BETWEEN and self.bytes_max is not None:
            return f"Size between: {format_size(self.bytes)} - {format_size(self.bytes_max)}"
        symbol = {SizeMode.GREATER_THAN: ">", SizeMode.LESS_THAN: "<", SizeMode.EQUALS: "="}
        return f"Size {symbol[self.mode]} {format_size(self.bytes)}"


# =============================================================================
# Date
# =============================================================================


class DateMode(str, Enum):
    """Comparison applied by a DateFilter."""

    CREATED_AFTER = "created_after"
    CREATED_BEFORE = "created_before"
    CREATED_BETWEEN = "created_between"
    MODIFIED_AFTER = "modified_after"
    MODIFIED_BEFORE = "modified_before"
    MODIFIED_BETWEEN = "modified_between"

    @property
    def uses_created(self) -> bool:
        return self.value.startswith("created")

    @property
    def is_range(self) -> bool:
        return self.value.endswith("between")


def _as_aware(value: datetime) -> datetime:
    # Naive datetimes are taken as local time so comparisons never raise.
    return value if value.tzinfo is not None else value.astimezone()


@dataclass(frozen=True, slots=True)
class DateFilter:
    """Match on creation or modification time.

    Attributes:
        mode: Which timestamp and comparison to use.
        value: Reference time (start of range for *_BETWEEN).
        value_end: Inclusive end of range, required for *_BETWEEN.
    """

    mode: DateMode
    value: datetime
    value_end: datetime | None = None

    def __post_init__(self) -> None:
        """Validate the range and normalize timestamps to aware datetimes."""
        object.__setattr__(self, "value", _as_aware(self.value))
        if self.value_end is not None:
            object.__setattr__(self, "value_end", _as_aware(self.value_end))
        if self.mode.is_range:
            if self.value_end is None:
                msg = f"Date filter '{self.mode.value}' requires an end date"
                raise InvalidFilterError(msg)
            if self.value_end < self.value:
                msg = "Date filter end date is before its start date"
                raise InvalidFilterError(msg)

    def matches(self, metadata: FileMetadata, case_sensitive: bool) -> bool:
        stamp = metadata.created if self.mode.uses_created else metadata.modified
        if stamp is None:
            return False
        stamp = _as_aware(stamp)
        if self.mode in (DateMode.CREATED_AFTER, DateMode.MODIFIED_AFTER):
            return stamp > self.value
        if self.mode in (DateMode.CREATED_BEFORE, DateMode.MODIFIED_BEFORE):
            return stamp < self.value
        if self.value_end is None:
            return False
        return self.value <= stamp <= self.value_end

    def describe(self) -> str:
        label = self.mode.value.replace("_", " ").capitalize()
        if self.value_end is not None and self.mode.is_range:
            return f"{label}: {self.value:%Y-%m-%d} - {self.value_end:%Y-%m-%d}"
        return f"{label}: {self.value:%Y-%m-%d}"


# =============================================================================
# Tags
# =============================================================================


class TagMode(str, Enum):
    """Membership test applied by a TagFilter."""

    HAS_TAG = "has_tag"
    NOT_HAS_TAG = "not_has_tag"
    HAS_ANY_OF = "has_any_of"
    HAS_ALL_OF = "has_all_of"


@dataclass(frozen=True, slots=True)
class TagFilter:
    """Match on tag membership, case-insensitively.

    Attributes:
        mode: Membership test.
        values: Tag names. Single-tag modes take exactly one.
    """

    mode: TagMode
    values: frozenset[str]

    def __post_init__(self) -> None:
        """Normalize tags and check the count required by the mode."""
        normalized = _normalize_set(self.values)
        if not normalized:
            msg = "Tag filter needs at least one tag"
            raise InvalidFilterError(msg)
        if self.mode in (TagMode.HAS_TAG, TagMode.NOT_HAS_TAG) and len(normalized) != 1:
            msg = f"Tag filter '{self.mode.value}' takes exactly one tag"
            raise InvalidFilterError(msg)
        object.__setattr__(self, "values", normalized)

    def matches(self, metadata: FileMetadata, case_sensitive: bool) -> bool:
        tags = {tag.casefold() for tag in metadata.tags}
        if self.mode == TagMode.HAS_TAG:
            return self.values <= tags
        if self.mode == TagMode.NOT_HAS_TAG:
            return not (self.values & tags)
        if self.mode == TagMode.HAS_ANY_OF:
            return bool(self.values & tags)
        return self.values <= tags

    def describe(self) -> str:
        return f"{self.mode.value.replace('_', ' ').capitalize()}: {', '.join(sorted(self.values))}"


# =============================================================================
# Comment
# =============================================================================


class CommentMode(str, Enum):
    """Comparison applied by a CommentFilter."""

    CONTAINS = "contains"
    NOT_CONTAINS = "not_contains"
    EQUALS = "equals"
    IS_EMPTY = "is_empty"


@dataclass(frozen=True, slots=True)
class CommentFilter:
    """Match on the entry's free-text comment.

    Entries without a comment never satisfy CONTAINS or EQUALS.

    Attributes:
        mode: Comparison to apply.
        value: Text to look for; ignored by IS_EMPTY.
    """

    mode: CommentMode
    value: str = ""

    def __post_init__(self) -> None:
        """Validate the filter."""
        if self.mode in (CommentMode.CONTAINS, CommentMode.NOT_CONTAINS) and not self.value:
            msg = f"Comment filter '{self.mode.value}' needs a non-empty value"
            raise InvalidFilterError(msg)

    def matches(self, metadata: FileMetadata, case_sensitive: bool) -> bool:
        if self.mode == CommentMode.IS_EMPTY:
            return not metadata.comment
        if metadata.comment is None:
            return self.mode == CommentMode.NOT_CONTAINS

        comment = _fold(metadata.comment, case_sensitive)
        value = _fold(self.value, case_sensitive)
        if self.mode == CommentMode.CONTAINS:
            return value in comment
        if self.mode == CommentMode.NOT_CONTAINS:
            return value not in comment
        return comment == value

    def describe(self) -> str:
        if self.mode == CommentMode.IS_EMPTY:
            return "Comment is empty"
        return f"Comment {self.mode.value.replace('_', ' ')}: {self.value}"


# =============================================================================
# Kind
# =============================================================================


@dataclass(frozen=True, slots=True)
class KindFilter:
    """Match on the entry kind.

    Attributes:
        category: FILE, FOLDER, PACKAGE or ALIAS.
    """

    category: FileKind

    def matches(self, metadata: FileMetadata, case_sensitive: bool) -> bool:
        if self.category == FileKind.FILE:
            return not metadata.is_directory and not metadata.is_package
        if self.category == FileKind.FOLDER:
            return metadata.is_directory and not metadata.is_package
        if self.category == FileKind.PACKAGE:
            return metadata.is_package
        return metadata.is_symlink

    def describe(self) -> str:
        return f"Kind: {self.category.value}"


FilterPredicate = (
    NameFilter
    | ExtensionFilter
    | SizeFilter
    | DateFilter
    | TagFilter
    | CommentFilter
    | KindFilter
)


def matches(metadata: FileMetadata, predicate: FilterPredicate, case_sensitive: bool) -> bool:
    """Evaluate one predicate against one entry.

    Args:
        metadata: Entry metadata.
        predicate: Well-formed predicate.
        case_sensitive: Case-sensitive name and comment comparison.

    Returns:
        True if the entry satisfies the predicate.
    """
    return predicate.matches(metadata, case_sensitive)


def matches_all(
    metadata: FileMetadata,
    predicates: Iterable[FilterPredicate],
    case_sensitive: bool,
) -> bool:
    """Evaluate a filter set with AND semantics (an empty set matches)."""
    return all(predicate.matches(metadata, case_sensitive) for predicate in predicates)


# =============================================================================
# Textual filter expressions
# =============================================================================

_E = TypeVar("_E", bound=Enum)


def parse_size(text: str) -> int:
    """Parse a size such as ``512``, ``10KB``, ``1.5M`` or ``2GiB`` into bytes.

    Raises:
        InvalidFilterError: If the text is not a size.
    """
    try:
        return units.parse_size(text)
    except ValueError as e:
        raise InvalidFilterError(str(e)) from e


def parse_date(text: str) -> datetime:
    """Parse an ISO 8601 date or datetime.

    Dates without a zone are taken as local time.

    Raises:
        InvalidFilterError: If the text is not an ISO date.
    """
    try:
        parsed = datetime.fromisoformat(text.strip())
    except ValueError as e:
        msg = f"Invalid date: '{text}' (use YYYY-MM-DD)"
        raise InvalidFilterError(msg) from e
    if parsed.tzinfo is None:
        return parsed.astimezone()
    return parsed.astimezone(UTC)


def _split_values(text: str) -> frozenset[str]:
    return frozenset(part for part in text.split(",") if part.strip())


def _enum_value(enum_type: type[_E], text: str, kind: str) -> _E:
    try:
        return enum_type(text.strip().lower().replace("-", "_"))
    except ValueError:
        choices = ", ".join(str(member.value) for member in enum_type)
        msg = f"Unknown {kind} mode '{text}' (choose from: {choices})"
        raise InvalidFilterError(msg) from None


def parse_filter(expression: str) -> FilterPredicate:
    """Build a predicate from its compact textual form.

    Grammar is ``kind:mode[:value[:value2]]``::

        name:contains:report
        ext:includes:txt,md
        size:greater_than:10MB
        size:between:1KB:2MB
        date:modified_after:2025-01-01
        date:created_between:2025-01-01:2025-02-01
        tag:has_any_of:red,blue
        comment:is_empty
        kind:folder

    Args:
        expression: Filter expression.

    Returns:
        The corresponding predicate.

    Raises:
        InvalidFilterError: If the expression is malformed.
    """
    kind, _, rest = expression.partition(":")
    kind = kind.strip().lower()
    if not rest:
        msg = f"Invalid filter expression '{expression}' (expected kind:mode[:value])"
        raise InvalidFilterError(msg)

    if kind == "kind":
        return KindFilter(_enum_value(FileKind, rest, "kind"))

    mode_text, _, value = rest.partition(":")

    if kind == "name":
        return NameFilter(_enum_value(NameMode, mode_text, "name"), value)

    if kind in ("ext", "extension"):
        ext_mode = _enum_value(ExtensionMode, mode_text, "extension")
        return ExtensionFilter(ext_mode, _split_values(value))

    if kind == "size":
        size_mode = _enum_value(SizeMode, mode_text, "size")
        if not value:
            msg = f"Size filter '{size_mode.value}' needs a size"
            raise InvalidFilterError(msg)
        low, _, high = value.partition(":")
        return SizeFilter(size_mode, parse_size(low), parse_size(high) if high else None)

    if kind == "date":
        date_mode = _enum_value(DateMode, mode_text, "date")
        if not value:
            msg = f"Date filter '{date_mode.value}' needs a date"
            raise InvalidFilterError(msg)
        start, end = _split_date_range(value)
        return DateFilter(date_mode, parse_date(start), parse_date(end) if end else None)

    if kind in ("tag", "tags"):
        return TagFilter(_enum_value(TagMode, mode_text, "tag"), _split_values(value))

    if kind == "comment":
        return CommentFilter(_enum_value(CommentMode, mode_text, "comment"), value)

    msg = f"Unknown filter kind '{kind}'"
    raise InvalidFilterError(msg)


def _split_date_range(value: str) -> tuple[str, str]:
    """Split ``start:end`` where either side may itself be an ISO datetime."""
    if ".." in value:
        start, _, end = value.partition("..")
        return start, end
    # Plain dates never contain ':'; datetimes do, so only split on the
    # separator that directly follows a full YYYY-MM-DD date.
    match = re.match(r"^(\d{4}-\d{2}-\d{2}):(\d{4}-\d{2}-\d{2}.*)$", value)
    if match:
        return match.group(1), match.group(2)
    return value, ""
