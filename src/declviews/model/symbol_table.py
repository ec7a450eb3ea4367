"""Global symbol table: the merge barrier between per-unit loading and analysis."""
from __future__ import annotations

from loguru import logger

from ..errors import DiagnosticKind, Diagnostics
from .declarations import validate_declaration


def parent_scope(qualified_name):
    parts = qualified_name.rsplit("::", 1)
    return parts[0] if len(parts) > 1 else None


class SymbolTable:
    """
    Arena of Declarations with stable ids.

    Ids are arena indices and never change once assigned: a full definition
    that arrives after a forward declaration takes over the forward
    declaration's slot.
    """

    def __init__(self, diagnostics=None):
        self.diagnostics = diagnostics if diagnostics is not None else Diagnostics()
        self.declarations = []
        self.bodies = []
        self.headers = {}
        self._ids = {}
        self._body_ids = {}
        self._by_short_name = {}

    @classmethod
    def merge(cls, units, diagnostics=None):
        """Merge translation units, in order, into one table"""
        table = cls(diagnostics)
        for unit in units:
            table.add_unit(unit)
        table.check_bases()
        logger.debug(
            "Merged {} unit(s): {} declaration(s), {} body record(s)",
            len(units), len(table.declarations), len(table.bodies),
        )
        return table

    def add_unit(self, unit):
        for declaration in unit.declarations:
            if not self.add(declaration) or not unit.header:
                continue
            if declaration.is_fully_defined:
                self.headers[declaration.name] = unit.header
            else:
                self.headers.setdefault(declaration.name, unit.header)
        for body in unit.bodies:
            self.add_body(body)

    def add(self, declaration):
        """
        Add a declaration, returns True when it became (or replaced) the
        stored definition.
        """
        validate_declaration(declaration)
        existing_id = self._ids.get(declaration.name)
        if existing_id is None:
            self._ids[declaration.name] = len(self.declarations)
            self.declarations.append(declaration)
            self._by_short_name.setdefault(declaration.short_name, []).append(declaration.name)
            return True

        existing = self.declarations[existing_id]
        if not declaration.is_fully_defined:
            return False
        if not existing.is_fully_defined:
            self.declarations[existing_id] = declaration
            return True
        if existing != declaration:
            self.diagnostics.report(
                DiagnosticKind.DUPLICATE_DEFINITION,
                declaration.name,
                f"definition from '{declaration.unit}' differs from the one in "
                f"'{existing.unit}'; keeping the first",
            )
        return False

    def add_body(self, body):
        existing_id = self._body_ids.get(body.name)
        if existing_id is None:
            self._body_ids[body.name] = len(self.bodies)
            self.bodies.append(body)
            return True
        existing = self.bodies[existing_id]
        if existing != body:
            self.diagnostics.report(
                DiagnosticKind.DUPLICATE_DEFINITION,
                body.name,
                f"body from '{body.unit}' differs from the one in '{existing.unit}'; "
                f"keeping the first",
            )
        return False

    def id_of(self, name):
        return self._ids.get(name)

    def get(self, name):
        decl_id = self._ids.get(name)
        if decl_id is None:
            return None
        return self.declarations[decl_id]

    def resolve(self, name, context=None):
        """
        Resolve a possibly unqualified name, searching from the context
        outward, then the global scope, then by unique short name.
        """
        if name.startswith("::"):
            return self.get(name[2:])

        scope = context
        while scope:
            candidate = f"{scope}::{name}"
            if candidate in self._ids:
                return self.get(candidate)
            scope = parent_scope(scope)

        if name in self._ids:
            return self.get(name)

        short = name.rsplit("::", 1)[-1]
        candidates = self._by_short_name.get(short, [])
        matches = [c for c in candidates if c == name or c.endswith("::" + name)]
        if len(matches) == 1:
            return self.get(matches[0])
        return None

    def interfaces(self):
        return [d for d in self.declarations if d.is_interface and d.is_fully_defined]

    def check_bases(self):
        for declaration in self.declarations:
            for base in declaration.bases:
                if self.resolve(base, context=declaration.name) is None:
                    self.diagnostics.report(
                        DiagnosticKind.UNRESOLVED_REFERENCE,
                        declaration.name,
                        f"base '{base}' is not declared in any unit",
                    )

    def header_of(self, name):
        return self.headers.get(name)

    def __contains__(self, name):
        return name in self._ids

    def __len__(self):
        return len(self.declarations)

    def __iter__(self):
        return iter(self.declarations)
