import networkx as nx
from loguru import logger


def iter_call_sites(calls):
    """Call sites of a body in source order, nested argument calls after their call"""
    stack = list(reversed(calls))
    while stack:
        call = stack.pop()
        yield call
        stack.extend(reversed(call.arguments))


class CallGraph:
    """
    Directed call graph with one edge per distinct (caller, callee) pair.

    Nodes and edges keep first-seen order: a body's own node, then its
    callees in source order. Names without a body become "external" nodes.
    """

    def __init__(self, bodies=()):
        self.graph = nx.DiGraph()
        self.bodies = list(bodies)
        self.kinds = {}
        for body in self.bodies:
            self.kinds.setdefault(body.name, body.kind)
        for body in self.bodies:
            self.add_body(body)
        logger.debug(
            "Call graph: {} node(s), {} edge(s)",
            self.graph.number_of_nodes(), self.graph.number_of_edges(),
        )

    def add_node(self, name):
        if name not in self.graph:
            kind = self.kinds.get(name, "external")
            self.graph.add_node(name, label=name, kind=kind, has_body=name in self.kinds)

    def add_body(self, body):
        self.add_node(body.name)
        for call in iter_call_sites(body.calls):
            self.add_node(call.callee)
            if not self.graph.has_edge(body.name, call.callee):
                self.graph.add_edge(body.name, call.callee, kind="call")

    def get_graph(self):
        return self.graph


def build_call_graph(bodies):
    return CallGraph(bodies).graph


def overlay_types(graph, classification):
    """Add declarations and their owned/referenced relationships to a call graph"""
    for name, data in classification.graph.nodes(data=True):
        if name not in graph:
            graph.add_node(name, label=data["label"], kind=data["kind"], has_body=False)
    for source, target, data in classification.graph.edges(data=True):
        if not graph.has_edge(source, target):
            graph.add_edge(source, target, kind=data["ownership"])
    return graph


def callees(graph, name):
    return [v for _, v, kind in graph.out_edges(name, data="kind") if kind == "call"]


def callers(graph, name):
    return [u for u, _, kind in graph.in_edges(name, data="kind") if kind == "call"]
