"""Per-invocation context threaded through the analyzer stages."""

from __future__ import annotations

import threading
from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

from parse.treesitter_tree import make_span

if TYPE_CHECKING:
    from tree_sitter import Node

    from contract.descriptors import DiagnosticDescriptor
    from parse.binder import DecoratorUsage
    from semantic.model import SemanticModel
    from semantic.symbols import Span


class AnalysisCancelled(Exception):
    """Raised when an analysis pass is cancelled through its token."""


class CancellationToken:
    """Thread-safe cancellation flag shared by every usage of one pass."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            msg = "analysis cancelled"
            raise AnalysisCancelled(msg)


class DiagnosticSink(Protocol):
    def report(
        self,
        descriptor: DiagnosticDescriptor,
        span: Span,
        arguments: tuple[object, ...],
        properties: Mapping[str, str] | None = None,
    ) -> None: ...


@dataclass(frozen=True)
class UsageContext:
    """Everything one analyzer invocation may look at or report to."""

    usage: DecoratorUsage
    semantic_model: SemanticModel
    cancellation_token: CancellationToken
    sink: DiagnosticSink

    def report_diagnostic(
        self,
        descriptor: DiagnosticDescriptor,
        anchor: Node,
        *arguments: object,
        properties: Mapping[str, str] | None = None,
    ) -> None:
        span = make_span(self.usage.path, anchor)
        self.sink.report(descriptor, span, arguments, properties)


__all__ = [
    "AnalysisCancelled",
    "CancellationToken",
    "DiagnosticSink",
    "UsageContext",
]
