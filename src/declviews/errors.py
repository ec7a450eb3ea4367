from __future__ import annotations

import enum
from dataclasses import dataclass

from loguru import logger


class DeclViewsError(Exception):
    """Base error for all fatal analysis and generation failures."""


class MalformedDeclaration(DeclViewsError):
    """Structural inconsistency in a declaration record. Aborts the run."""

    def __init__(self, declaration, reason):
        self.declaration = declaration
        self.reason = reason
        name = getattr(declaration, "name", declaration)
        super().__init__(f"Malformed declaration '{name}': {reason}")


class InvalidOwnershipCycle(DeclViewsError):
    """A by-value embedding cycle. Valid C++ cannot produce one."""

    def __init__(self, cycle):
        self.cycle = list(cycle)
        path = " -> ".join(self.cycle + self.cycle[:1])
        super().__init__(f"Invalid ownership cycle: {path}")


class NotAnInterface(DeclViewsError):
    """A stub was requested for a declaration that is not an interface."""


class UnitFormatError(DeclViewsError):
    """A front-end translation unit document could not be read."""


class DiagnosticKind(enum.Enum):
    UNRESOLVED_REFERENCE = "UnresolvedReference"
    DUPLICATE_DEFINITION = "DuplicateDefinition"


@dataclass(frozen=True)
class Diagnostic:
    kind: DiagnosticKind
    subject: str
    message: str

    def __str__(self):
        return f"{self.kind.value}: {self.subject}: {self.message}"


class Diagnostics:
    """Ordered, duplicate-free collection of recoverable problems."""

    def __init__(self):
        self._items: list[Diagnostic] = []
        self._seen: set[Diagnostic] = set()

    def report(self, kind, subject, message):
        diagnostic = Diagnostic(kind=kind, subject=subject, message=message)
        if diagnostic in self._seen:
            return diagnostic
        self._seen.add(diagnostic)
        self._items.append(diagnostic)
        logger.warning("{}", diagnostic)
        return diagnostic

    def of_kind(self, kind):
        return [d for d in self._items if d.kind == kind]

    def __iter__(self):
        return iter(self._items)

    def __len__(self):
        return len(self._items)

    def __bool__(self):
        return bool(self._items)
