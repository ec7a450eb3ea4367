from loguru import logger

from ...utils import postprocessor
from .callgraph import CallGraph, overlay_types


class CallGraphDriver:
    def __init__(
        self,
        symbols,
        classification=None,
        output_file=None,
        properties=None,
    ):
        self.symbols = symbols
        self.properties = properties if properties is not None else {}
        self.graph_format = self.properties.get("graph_format", "graphml")

        self.call_graph = CallGraph(symbols.bodies)
        self.graph = self.call_graph.graph
        if self.properties.get("include_types") and classification is not None:
            overlay_types(self.graph, classification)
        logger.info(
            "Built call graph with {} node(s) and {} edge(s)",
            self.graph.number_of_nodes(), self.graph.number_of_edges(),
        )

        self.written = []
        self.json = None
        if output_file:
            self.written = postprocessor.write_graph(self.graph, output_file, self.graph_format)
            if self.graph_format in ("json", "all"):
                self.json = postprocessor.networkx_to_json(self.graph)

    def get_graph(self):
        return self.graph
