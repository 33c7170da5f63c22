"""Concurrent, cancellable filesystem search.

A search walks every root of a SearchRequest on a worker thread pool.
Walkers push batches of matches into a bounded queue; a single dispatcher
thread drains it and hands each batch to the consumer, so consumer
callbacks never run concurrently with each other.

Cancellation is cooperative: walkers look at the job's cancel flag once
per directory and while waiting for room in the queue. Delivery and
cancel() share one reentrant lock, which makes the guarantee "no batch is
delivered after cancel() returns" hold even when cancel() races with the
last batch, and lets a callback cancel its own job.
"""

import logging
import os
import queue
import threading
from collections.abc import Callable, Iterator
from concurrent.futures import ThreadPoolExecutor
from types import TracebackType

from tidyctl.core.reducer import reduce_paths
from tidyctl.search.filters import CommentFilter, TagFilter, matches_all
from tidyctl.search.metadata import (
    MetadataProvider,
    XattrMetadataProvider,
    read_entry_metadata,
)
from tidyctl.search.models import FileMetadata, SearchRequest, SearchResult, SearchType
from tidyctl.search.protected import (
    HOME_FOLDER_NAMES,
    SYSTEM_FOLDERS,
    is_system_path,
    looks_like_system_root,
)

logger = logging.getLogger(__name__)

BatchCallback = Callable[[list[SearchResult]], None]
CompleteCallback = Callable[[], None]
Walker = Callable[[str, threading.Event], Iterator[list[SearchResult]]]

# How long a blocked producer waits before looking at the cancel flag again.
_POLL_SECONDS = 0.05

_ROOT_DONE = object()
_END = object()


def _offer(out: queue.Queue[object], item: object, stop: threading.Event) -> bool:
    """Put an item into a bounded queue unless ``stop`` is set first."""
    while not stop.is_set():
        try:
            out.put(item, timeout=_POLL_SECONDS)
            return True
        except queue.Full:
            continue
    return False


class SearchJob:
    """Handle of one running search.

    Created by :meth:`SearchEngine.search`; the walk starts immediately.

    Attributes:
        request: The request being executed.
    """

    def __init__(
        self,
        request: SearchRequest,
        roots: list[str],
        walker: Walker,
        on_batch: BatchCallback,
        on_complete: CompleteCallback | None,
        *,
        max_workers: int,
        queue_size: int,
    ) -> None:
        self.request = request
        self._roots = roots
        self._walker = walker
        self._on_batch = on_batch
        self._on_complete = on_complete
        self._max_workers = max(1, min(max_workers, len(roots) or 1))
        self._queue: queue.Queue[object] = queue.Queue(maxsize=queue_size)
        self._cancelled = threading.Event()
        self._done = threading.Event()
        self._delivery_lock = threading.RLock()
        self._thread = threading.Thread(
            target=self._dispatch,
            name="tidyctl-search",
            daemon=True,
        )
        self._thread.start()

    @property
    def cancelled(self) -> bool:
        """Whether cancel() has been called (or a callback failed)."""
        return self._cancelled.is_set()

    @property
    def done(self) -> bool:
        """Whether the completion callback has run."""
        return self._done.is_set()

    def cancel(self) -> None:
        """Stop the search.

        Idempotent and safe from any thread, including from inside the
        batch callback. Once this returns no further batch is delivered;
        the completion callback still runs exactly once.
        """
        with self._delivery_lock:
            if not self._cancelled.is_set():
                logger.debug("Cancelling search of %s", ", ".join(self._roots))
            self._cancelled.set()

    def wait(self, timeout: float | None = None) -> bool:
        """Block until the search has completed.

        Must not be called from the batch callback of the same job.

        Args:
            timeout: Seconds to wait, None to wait indefinitely.

        Returns:
            True if the search completed within the timeout.
        """
        return self._done.wait(timeout)

    def _walk(self, root: str) -> None:
        try:
            for batch in self._walker(root, self._cancelled):
                if not _offer(self._queue, batch, self._cancelled):
                    break
        except Exception:
            logger.exception("Search of %s failed", root)
        finally:
            # The dispatcher never stops draining before every root reports,
            # so this blocking put always completes.
            self._queue.put(_ROOT_DONE)

    def _deliver(self, batch: list[SearchResult]) -> None:
        with self._delivery_lock:
            if self._cancelled.is_set():
                return
            try:
                self._on_batch(batch)
            except Exception:
                logger.exception("Search batch callback failed, cancelling search")
                self._cancelled.set()

    def _dispatch(self) -> None:
        pending = len(self._roots)
        with ThreadPoolExecutor(
            max_workers=self._max_workers,
            thread_name_prefix="tidyctl-walk",
        ) as executor:
            for root in self._roots:
                executor.submit(self._walk, root)

            while pending:
                item = self._queue.get()
                if item is _ROOT_DONE:
                    pending -= 1
                    continue
                self._deliver(item)  # type: ignore[arg-type]

        logger.debug(
            "Search of %s finished%s",
            ", ".join(self._roots) or "(no roots)",
            " (cancelled)" if self.cancelled else "",
        )
        try:
            if self._on_complete is not None:
                self._on_complete()
        except Exception:
            logger.exception("Search completion callback failed")
        finally:
            self._done.set()


class SearchStream:
    """Iterator over the result batches of one search.

    Batches are buffered in a bounded queue: when the consumer falls
    behind, the walkers block instead of piling up results. Closing the
    stream, or leaving its ``with`` block, cancels the search.

    Example:
        >>> with engine.stream(request) as batches:
        ...     for batch in batches:
        ...         show(batch)
    """

    def __init__(self, engine: "SearchEngine", request: SearchRequest, queue_size: int) -> None:
        self._buffer: queue.Queue[object] = queue.Queue(maxsize=queue_size)
        self._closed = threading.Event()
        self._finished = False
        self._job = engine.search(request, self._push, self._finish)

    @property
    def job(self) -> SearchJob:
        """Underlying search job."""
        return self._job

    def _push(self, batch: list[SearchResult]) -> None:
        _offer(self._buffer, batch, self._closed)

    def _finish(self) -> None:
        _offer(self._buffer, _END, self._closed)

    def __iter__(self) -> "SearchStream":
        return self

    def __next__(self) -> list[SearchResult]:
        if self._finished or self._closed.is_set():
            raise StopIteration
        item = self._buffer.get()
        if item is _END:
            self._finished = True
            raise StopIteration
        return item  # type: ignore[return-value]

    def results(self) -> Iterator[SearchResult]:
        """Iterate over individual results instead of batches."""
        for batch in self:
            yield from batch

    def close(self) -> None:
        """Cancel the search and stop iteration. Idempotent."""
        self._closed.set()
        self._job.cancel()

    def __enter__(self) -> "SearchStream":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


class SearchEngine:
    """Walks directory trees and streams entries matching a request.

    Args:
        batch_size: Maximum number of results per delivered batch.
        max_workers: Upper bound on roots walked concurrently.
        queue_size: Batches buffered between walkers and the consumer.
        system_folders: Absolute directories skipped when a request
            excludes system folders.
        metadata_provider: Source of tags and comments. Only consulted
            when a request filters on them.
    """

    def __init__(
        self,
        *,
        batch_size: int = 50,
        max_workers: int = 4,
        queue_size: int = 64,
        system_folders: tuple[str, ...] = SYSTEM_FOLDERS,
        metadata_provider: MetadataProvider | None = None,
    ) -> None:
        if batch_size < 1:
            msg = f"batch_size must be at least 1, got {batch_size}"
            raise ValueError(msg)
        if max_workers < 1:
            msg = f"max_workers must be at least 1, got {max_workers}"
            raise ValueError(msg)
        if queue_size < 1:
            msg = f"queue_size must be at least 1, got {queue_size}"
            raise ValueError(msg)
        self._batch_size = batch_size
        self._max_workers = max_workers
        self._queue_size = queue_size
        self._system_folders = system_folders
        self._metadata_provider = metadata_provider or XattrMetadataProvider()

    def search(
        self,
        request: SearchRequest,
        on_batch: BatchCallback,
        on_complete: CompleteCallback | None = None,
    ) -> SearchJob:
        """Start a search in the background.

        Batches are delivered in traversal order within each root; batches
        of different roots interleave. Overlapping roots are searched once.

        Args:
            request: What to search for.
            on_batch: Called with each non-empty batch of results.
            on_complete: Called exactly once when every root has settled,
                whether the search ran to the end or was cancelled.

        Returns:
            Job handle used to cancel or wait for the search.
        """
        roots = self._prepare_roots(request)
        logger.debug("Starting search of %s with %d filter(s)", roots, len(request.filters))
        return SearchJob(
            request,
            roots,
            lambda root, cancelled: self._walk_root(root, request, cancelled),
            on_batch,
            on_complete,
            max_workers=self._max_workers,
            queue_size=self._queue_size,
        )

    def stream(self, request: SearchRequest) -> SearchStream:
        """Start a search whose batches are consumed by iteration.

        Args:
            request: What to search for.

        Returns:
            Stream of result batches; close it to cancel the search.
        """
        return SearchStream(self, request, self._queue_size)

    def _prepare_roots(self, request: SearchRequest) -> list[str]:
        absolute = [os.path.abspath(os.path.expanduser(root)) for root in request.roots]
        reduced = reduce_paths(absolute)
        # Keep the caller's root order for the surviving roots.
        ordered: list[str] = []
        for root in absolute:
            normalized = os.path.normpath(root)
            if normalized in reduced and normalized not in ordered:
                ordered.append(normalized)
        return ordered

    def _accepts_type(self, metadata: FileMetadata, search_type: SearchType) -> bool:
        if search_type == SearchType.FILES_ONLY:
            return not metadata.is_directory
        if search_type == SearchType.FOLDERS_ONLY:
            return metadata.is_directory
        return True

    def _walk_root(
        self,
        root: str,
        request: SearchRequest,
        cancelled: threading.Event,
    ) -> Iterator[list[SearchResult]]:
        """Depth-first walk of one root, yielding batches of matches.

        A batch is yielded when it is full and whenever a directory listing
        is exhausted.
        """
        system_root = root if looks_like_system_root(root) else None
        needs_metadata = any(isinstance(f, TagFilter | CommentFilter) for f in request.filters)
        provider = self._metadata_provider if needs_metadata else None

        stack = [root]
        while stack:
            if cancelled.is_set():
                return
            current = stack.pop()

            try:
                with os.scandir(current) as it:
                    entries = sorted(it, key=lambda e: e.name)
            except OSError as e:
                logger.debug("Skipping unreadable directory %s: %s", current, e)
                continue

            batch: list[SearchResult] = []
            subdirs: list[str] = []
            for entry in entries:
                if not request.include_hidden and entry.name.startswith("."):
                    continue
                if request.exclude_system_folders and is_system_path(
                    entry.path, root=system_root, folders=self._system_folders
                ):
                    continue

                metadata = read_entry_metadata(entry, provider)
                matched = self._accepts_type(metadata, request.search_type) and matches_all(
                    metadata, request.filters, request.case_sensitive
                )
                if matched:
                    batch.append(SearchResult.from_metadata(metadata))
                    if len(batch) >= self._batch_size:
                        yield batch
                        batch = []

                if (
                    request.include_subfolders
                    and metadata.is_directory
                    and not (matched and request.collapse_nested)
                ):
                    subdirs.append(entry.path)

            if batch:
                yield batch

            if current == system_root:
                # User data first on an OS volume.
                home = [p for p in subdirs if os.path.basename(p) in HOME_FOLDER_NAMES]
                subdirs = home + [p for p in subdirs if p not in home]
            stack.extend(reversed(subdirs))
