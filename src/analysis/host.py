"""Host driver: binds a project, dispatches usages and collects diagnostics.

Syntax trees, symbol tables and the project index are built first and shared
read-only; usages are then dispatched to registered actions, concurrently
when every analyzer allows it. Collected diagnostics are sorted so repeated
runs over the same input yield identical output.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import TYPE_CHECKING, Protocol

from analysis.context import AnalysisCancelled, CancellationToken, UsageContext
from contract.models import DiagnosticRecord, SourceSpan
from parse.binder import DEFAULT_DECORATORS, bind_module
from parse.name_resolution import DEFAULT_NAMEOF_FUNCTIONS, ProjectIndex
from utils import path_to_module

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Mapping, Sequence

    from contract.descriptors import DiagnosticDescriptor
    from parse.binder import BoundModule
    from scan.files import SourceFile
    from semantic.symbols import Span

logger = logging.getLogger(__name__)


class Analyzer(Protocol):
    supported_descriptors: tuple[DiagnosticDescriptor, ...]

    def initialize(self, context: AnalysisContext) -> None: ...


class AnalysisContext:
    """Registration surface handed to analyzers at start-up."""

    def __init__(self) -> None:
        self._actions: list[Callable[[UsageContext], None]] = []
        self._concurrent_requests = 0

    def register_usage_action(self, callback: Callable[[UsageContext], None]) -> None:
        self._actions.append(callback)

    def enable_concurrent_execution(self) -> None:
        self._concurrent_requests += 1

    @property
    def actions(self) -> tuple[Callable[[UsageContext], None], ...]:
        return tuple(self._actions)

    def allows_concurrency(self, analyzer_count: int) -> bool:
        return self._concurrent_requests >= analyzer_count


class _CollectingSink:
    """Thread-safe sink applying severity configuration to reports."""

    def __init__(self, severity_overrides: Mapping[str, str]) -> None:
        self._overrides = dict(severity_overrides)
        self._lock = threading.Lock()
        self._records: list[DiagnosticRecord] = []

    def report(
        self,
        descriptor: DiagnosticDescriptor,
        span: Span,
        arguments: tuple[object, ...],
        properties: Mapping[str, str] | None = None,
    ) -> None:
        severity = self._overrides.get(descriptor.id, descriptor.default_severity)
        if severity == "off":
            return

        record = DiagnosticRecord(
            id=descriptor.id,
            severity=severity,
            category=descriptor.category,
            title=descriptor.title,
            message=descriptor.format_message(*arguments),
            span=SourceSpan(
                path=span.path,
                start_line=span.start_line,
                start_col=span.start_col,
                end_line=span.end_line,
                end_col=span.end_col,
            ),
            properties=dict(properties or {}),
        )
        with self._lock:
            self._records.append(record)

    @property
    def records(self) -> list[DiagnosticRecord]:
        with self._lock:
            return list(self._records)


def bind_sources(
    sources: Iterable[SourceFile],
    decorators: Sequence[str] = DEFAULT_DECORATORS,
) -> list[BoundModule]:
    """Bind every source file; files that map to no module name are skipped."""
    modules: list[BoundModule] = []
    for source in sources:
        try:
            module_name = path_to_module(source.relative_path)
        except ValueError as exc:
            logger.warning("skipping %s: %s", source.relative_path, exc)
            continue
        modules.append(
            bind_module(
                source.content,
                source.relative_path,
                module_name,
                decorators=tuple(decorators),
            )
        )
    return modules


def build_project_index(
    sources: Iterable[SourceFile],
    decorators: Sequence[str] = DEFAULT_DECORATORS,
    nameof_functions: Sequence[str] = DEFAULT_NAMEOF_FUNCTIONS,
) -> ProjectIndex:
    return ProjectIndex(bind_sources(sources, decorators), nameof_functions)


class AnalysisHost:
    """Runs analyzers over every decorator usage of a project index."""

    def __init__(
        self,
        analyzers: Sequence[Analyzer],
        severity_overrides: Mapping[str, str] | None = None,
        max_workers: int | None = None,
    ) -> None:
        self._analyzers = tuple(analyzers)
        self._severity_overrides = dict(severity_overrides or {})
        self._max_workers = max_workers
        self._context = AnalysisContext()
        for analyzer in self._analyzers:
            analyzer.initialize(self._context)

    @property
    def supported_descriptors(self) -> tuple[DiagnosticDescriptor, ...]:
        return tuple(
            descriptor
            for analyzer in self._analyzers
            for descriptor in analyzer.supported_descriptors
        )

    def run(
        self,
        index: ProjectIndex,
        cancellation_token: CancellationToken | None = None,
    ) -> list[DiagnosticRecord]:
        """Analyze every usage and return sorted diagnostics.

        Raises:
            AnalysisCancelled: If the token is cancelled during the pass.
        """
        token = cancellation_token or CancellationToken()
        sink = _CollectingSink(self._severity_overrides)

        contexts = [
            UsageContext(
                usage=usage,
                semantic_model=index.model_for(module.module),
                cancellation_token=token,
                sink=sink,
            )
            for module in index.modules
            for usage in module.usages
        ]
        actions = self._context.actions
        logger.debug("dispatching %d usages to %d actions", len(contexts), len(actions))

        if len(contexts) > 1 and self._context.allows_concurrency(len(self._analyzers)):
            self._run_concurrent(contexts, actions)
        else:
            for context in contexts:
                for action in actions:
                    action(context)

        return sorted(sink.records, key=lambda record: record.sort_key())

    def _run_concurrent(
        self,
        contexts: list[UsageContext],
        actions: tuple[Callable[[UsageContext], None], ...],
    ) -> None:
        with ThreadPoolExecutor(max_workers=self._max_workers) as executor:
            futures = [
                executor.submit(action, context) for context in contexts for action in actions
            ]
            try:
                for future in as_completed(futures):
                    future.result()
            except AnalysisCancelled:
                for future in futures:
                    future.cancel()
                raise


__all__ = [
    "AnalysisContext",
    "AnalysisHost",
    "bind_sources",
    "build_project_index",
]
