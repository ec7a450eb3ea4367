from __future__ import annotations

import enum
from dataclasses import dataclass

import networkx as nx
from loguru import logger

from ...errors import DiagnosticKind, InvalidOwnershipCycle


class Ownership(enum.Enum):
    OWNED = "owned"
    REFERENCED = "referenced"


@dataclass(frozen=True)
class ClassificationEdge:
    source: str
    site: str
    target: str
    ownership: Ownership
    resolved: bool = True

    @property
    def is_owned(self):
        return self.ownership == Ownership.OWNED


def field_site(name):
    return f"field:{name}"


def base_site(name):
    return f"base:{name}"


def parameter_site(method_index, method, param_index):
    return f"method:{method_index}:{method.name}/param:{param_index}"


def return_site(method_index, method):
    return f"method:{method_index}:{method.name}/return"


class Classification:
    """
    Result of classifying every type usage of a merged symbol table.

    ``order`` lists declaration names so that every Owned target comes before
    the declarations embedding it. ``graph`` is the relationship graph with
    one edge per (source, target) pair; an Owned site wins over a Referenced
    one for the same pair.
    """

    def __init__(self, edges, order, graph):
        self.edges = tuple(edges)
        self.order = tuple(order)
        self.graph = graph
        self._by_site = {(e.source, e.site): e for e in self.edges}
        self._position = {name: index for index, name in enumerate(self.order)}

    def of_site(self, source, site):
        return self._by_site.get((source, site))

    def of_field(self, source, field_name):
        return self.of_site(source, field_site(field_name))

    def of_base(self, source, base_name):
        return self.of_site(source, base_site(base_name))

    def of_parameter(self, declaration, method_index, param_index):
        method = declaration.methods[method_index]
        return self.of_site(declaration.name, parameter_site(method_index, method, param_index))

    def of_return(self, declaration, method_index):
        method = declaration.methods[method_index]
        return self.of_site(declaration.name, return_site(method_index, method))

    def edges_from(self, source):
        return [e for e in self.edges if e.source == source]

    def owned_targets(self, source):
        return [e.target for e in self.edges if e.source == source and e.is_owned]

    def position(self, name):
        return self._position.get(name)

    def sort(self, names):
        """Order names by dependency order, unknown names last in input order"""
        known = [n for n in names if n in self._position]
        unknown = [n for n in names if n not in self._position]
        return sorted(known, key=self._position.__getitem__) + unknown


class TypeClassifier:
    """
    Classifies fields, bases, parameters and returns as Owned or Referenced.

    Args:
        symbols: the merged SymbolTable
        diagnostics: Diagnostics collecting UnresolvedReference records
    """

    def __init__(self, symbols, diagnostics=None):
        self.symbols = symbols
        if diagnostics is None:
            diagnostics = symbols.diagnostics
        self.diagnostics = diagnostics

    def classify_type(self, semantic_type, context):
        """(target, ownership, resolved) for a type usage, None for primitives"""
        target = semantic_type.target_name()
        if target is None:
            return None

        declaration = self.symbols.resolve(target, context=context)
        if declaration is None:
            self.diagnostics.report(
                DiagnosticKind.UNRESOLVED_REFERENCE,
                context,
                f"type '{target}' is not declared in any unit",
            )
            return target, Ownership.REFERENCED, False
        if semantic_type.is_indirect:
            return declaration.name, Ownership.REFERENCED, True
        if not declaration.is_fully_defined:
            self.diagnostics.report(
                DiagnosticKind.UNRESOLVED_REFERENCE,
                context,
                f"'{declaration.name}' is used by value but only forward declared",
            )
            return declaration.name, Ownership.REFERENCED, True
        return declaration.name, Ownership.OWNED, True

    def classify_base(self, declaration, base):
        resolved = self.symbols.resolve(base, context=declaration.name)
        if resolved is None:
            self.diagnostics.report(
                DiagnosticKind.UNRESOLVED_REFERENCE,
                declaration.name,
                f"base '{base}' is not declared in any unit",
            )
            return base, Ownership.REFERENCED, False
        if not resolved.is_fully_defined:
            self.diagnostics.report(
                DiagnosticKind.UNRESOLVED_REFERENCE,
                declaration.name,
                f"base '{resolved.name}' is only forward declared",
            )
            return resolved.name, Ownership.REFERENCED, True
        return resolved.name, Ownership.OWNED, True

    def declaration_edges(self, declaration):
        """Classification edges of one declaration, in member order"""
        edges = []

        def add(site, result):
            if result is not None:
                target, ownership, resolved = result
                edges.append(
                    ClassificationEdge(declaration.name, site, target, ownership, resolved)
                )

        for base in declaration.bases:
            add(base_site(base), self.classify_base(declaration, base))
        for member in declaration.fields:
            add(field_site(member.name), self.classify_type(member.type, declaration.name))
        for method_index, method in enumerate(declaration.methods):
            for param_index, param in enumerate(method.parameters):
                add(
                    parameter_site(method_index, method, param_index),
                    self.classify_type(param.type, declaration.name),
                )
            if method.return_type is not None:
                add(
                    return_site(method_index, method),
                    self.classify_type(method.return_type, declaration.name),
                )
        return edges

    def classify(self):
        edges = []
        for declaration in self.symbols:
            edges.extend(self.declaration_edges(declaration))
        order = self.dependency_order(edges)
        graph = self.relationship_graph(edges)
        logger.debug(
            "Classified {} edge(s) over {} declaration(s)", len(edges), len(self.symbols)
        )
        return Classification(edges, order, graph)

    def dependency_order(self, edges):
        """
        Topological order of the Owned subgraph, ties broken by arena id.

        Field and base embeddings must be acyclic. By-value parameters and
        returns only add an ordering constraint when it does not close a
        cycle: C++ accepts incomplete types in member function declarations.
        """
        owned = nx.DiGraph()
        owned.add_nodes_from(d.name for d in self.symbols)
        hard = [e for e in edges if e.is_owned and not e.site.startswith("method:")]
        soft = [e for e in edges if e.is_owned and e.site.startswith("method:")]

        owned.add_edges_from((e.target, e.source) for e in hard)
        try:
            cycle = nx.find_cycle(owned)
        except nx.NetworkXNoCycle:
            cycle = None
        if cycle is not None:
            raise InvalidOwnershipCycle([dependent for _, dependent in cycle])

        for edge in soft:
            if edge.target == edge.source or owned.has_edge(edge.target, edge.source):
                continue
            if nx.has_path(owned, edge.source, edge.target):
                continue
            owned.add_edge(edge.target, edge.source)

        return list(nx.lexicographical_topological_sort(owned, key=self.symbols.id_of))

    def relationship_graph(self, edges):
        graph = nx.DiGraph()
        for declaration in self.symbols:
            if not declaration.is_fully_defined:
                kind = "forward"
            else:
                kind = declaration.kind.value
            graph.add_node(declaration.name, label=declaration.name, kind=kind)
        for edge in edges:
            if edge.target not in graph:
                graph.add_node(edge.target, label=edge.target, kind="opaque")
            if graph.has_edge(edge.source, edge.target):
                if edge.is_owned:
                    graph.edges[edge.source, edge.target]["ownership"] = Ownership.OWNED.value
                continue
            graph.add_edge(edge.source, edge.target, ownership=edge.ownership.value)
        return graph


def classify(symbols, diagnostics=None):
    return TypeClassifier(symbols, diagnostics).classify()