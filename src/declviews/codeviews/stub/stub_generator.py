from __future__ import annotations

import threading
from collections import Counter, deque
from concurrent.futures import ThreadPoolExecutor

from loguru import logger

from ...errors import DiagnosticKind, NotAnInterface
from ...model.declarations import SpecialMember, TypeKind, special_member_kind
from ...utils.cpp_nodes import sanitize_identifier
from .stub_model import (
    CallbackInterface,
    InstrumentedMethod,
    PassthroughMethod,
    ReturnKind,
    StubDeclaration,
)


class StubGenerator:
    """
    Builds StubDeclarations for interfaces of a merged symbol table.

    Generation is memoized by qualified interface name. Interfaces reached
    through interface-typed returns are stubbed from a worklist, so cyclic
    return graphs terminate and every interface is stubbed once.

    Args:
        symbols: the merged SymbolTable
        classification: optional Classification used to order results
        diagnostics: Diagnostics receiving UnresolvedReference records
        prefix: name prefix of generated classes and namespaces
    """

    def __init__(self, symbols, classification=None, diagnostics=None, prefix="Stub"):
        self.symbols = symbols
        self.classification = classification
        if diagnostics is None:
            diagnostics = symbols.diagnostics
        self.diagnostics = diagnostics
        self.prefix = prefix
        self._memo = {}
        self._lock = threading.Lock()

    def interface(self, name):
        declaration = self.symbols.resolve(name)
        if declaration is None:
            raise NotAnInterface(f"'{name}' is not declared in any unit")
        if not declaration.is_interface:
            raise NotAnInterface(f"'{declaration.name}' is a class, not an interface")
        if not declaration.is_fully_defined:
            raise NotAnInterface(f"'{declaration.name}' is only forward declared")
        return declaration

    def generate(self, name):
        root = self.interface(name)
        worklist = deque([root])
        while worklist:
            declaration = worklist.popleft()
            with self._lock:
                if declaration.name in self._memo:
                    continue
            stub = self.build(declaration)
            with self._lock:
                stored = self._memo.setdefault(declaration.name, stub)
            if stored is stub:
                logger.debug("Generated {} for {}", stub.name, declaration.name)
            for nested in stored.nested:
                worklist.append(self.symbols.get(nested))
        return self._memo[root.name]

    def generate_all(self, names=None, workers=1):
        """
        Stub every named interface (all interfaces when None) and return the
        memoized stubs, including nested ones, in dependency order.
        """
        if names is None:
            names = [d.name for d in self.symbols.interfaces()]
        if workers > 1 and len(names) > 1:
            with ThreadPoolExecutor(max_workers=workers) as pool:
                list(pool.map(self.generate, names))
        else:
            for name in names:
                self.generate(name)
        return self.stubs()

    def stubs(self):
        with self._lock:
            names = list(self._memo)
        if self.classification is not None:
            names = self.classification.sort(names)
        else:
            names.sort(key=self.symbols.id_of)
        return [self._memo[name] for name in names]

    def __contains__(self, name):
        return name in self._memo

    def __len__(self):
        return len(self._memo)

    def flatten(self, interface):
        """
        Pure-virtual methods of an interface and its bases.

        Own methods come first, then bases depth-first in declaration order.
        A signature reached through several paths is kept once.
        """
        methods = []
        passthrough = []
        unresolved = []
        visited = set()
        signatures = set()
        passthrough_signatures = set()

        def visit(declaration):
            if declaration.name in visited:
                return
            visited.add(declaration.name)
            for method in declaration.methods:
                if not method.is_pure_virtual:
                    continue
                special = special_member_kind(declaration, method)
                if special == SpecialMember.ASSIGNMENT:
                    if method.signature() not in passthrough_signatures:
                        passthrough_signatures.add(method.signature())
                        passthrough.append(PassthroughMethod(declaration.name, method))
                    continue
                if special is not None:
                    continue
                if method.signature() in signatures:
                    continue
                signatures.add(method.signature())
                methods.append((declaration.name, method))
            for base in declaration.bases:
                resolved = self.symbols.resolve(base, context=declaration.name)
                if resolved is None or not resolved.is_fully_defined:
                    self.diagnostics.report(
                        DiagnosticKind.UNRESOLVED_REFERENCE,
                        declaration.name,
                        f"base '{base}' is not declared in any unit"
                        if resolved is None
                        else f"base '{resolved.name}' is only forward declared",
                    )
                    unresolved.append(base)
                    continue
                visit(resolved)

        visit(interface)
        return methods, passthrough, unresolved

    def return_kind(self, method, declaring):
        """ReturnKind and, for interface returns, the interface to nest"""
        return_type = method.return_type
        if return_type.is_void:
            return ReturnKind.VOID, None
        if return_type.is_indirect and return_type.inner.kind == TypeKind.NAMED:
            target = self.symbols.resolve(return_type.inner.name, context=declaring)
            if target is not None and target.is_interface and target.is_fully_defined:
                if return_type.kind == TypeKind.REFERENCE:
                    return ReturnKind.INTERFACE_REFERENCE, target.name
                return ReturnKind.INTERFACE_POINTER, target.name
        if return_type.kind == TypeKind.REFERENCE:
            return ReturnKind.REFERENCE, None
        return ReturnKind.VALUE, None

    def accessor_names(self, methods):
        """
        One distinct accessor per method.

        A unique method name is used as is. Overloads are mangled with their
        parameter spellings, and a mangled name that is already taken gets a
        numeric suffix.
        """
        name_counts = Counter(method.identifier() for method in methods)
        used = {m.identifier() for m in methods if name_counts[m.identifier()] == 1}
        accessors = []
        for method in methods:
            if name_counts[method.identifier()] == 1:
                accessors.append(method.identifier())
                continue
            mangled = method.mangled_name()
            accessor = mangled
            index = 2
            while accessor in used:
                accessor = f"{mangled}_{index}"
                index += 1
            used.add(accessor)
            accessors.append(accessor)
        return accessors

    def build(self, interface):
        collected, passthrough, unresolved = self.flatten(interface)
        accessors = self.accessor_names([method for _, method in collected])

        instrumented = []
        nested = []
        for (declaring, method), accessor in zip(collected, accessors):
            return_kind, nested_interface = self.return_kind(method, declaring)
            if nested_interface is not None and nested_interface not in nested:
                nested.append(nested_interface)
            instrumented.append(
                InstrumentedMethod(
                    accessor=accessor,
                    declaring=declaring,
                    method=method,
                    return_kind=return_kind,
                    callback=CallbackInterface(
                        name="I" + accessor,
                        method=accessor,
                        parameters=method.parameters,
                        return_type=method.return_type,
                    ),
                    nested=nested_interface,
                )
            )

        suffix = sanitize_identifier(interface.name)
        return StubDeclaration(
            interface=interface.name,
            name=self.prefix + suffix,
            suffix=suffix,
            prefix=self.prefix,
            methods=tuple(instrumented),
            passthrough=tuple(passthrough),
            nested=tuple(nested),
            unresolved_bases=tuple(unresolved),
        )
