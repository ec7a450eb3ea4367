import copy
import json
import os

import networkx as nx
from loguru import logger
from networkx.readwrite import json_graph

GRAPH_FORMATS = ("graphml", "json", "all")


def _drop_none_attributes(og_graph):
    """GraphML has no null: attributes set to None are left out"""
    graph = copy.deepcopy(og_graph)
    for node in graph.nodes:
        for key in [k for k, v in graph.nodes[node].items() if v is None]:
            del graph.nodes[node][key]
    for u, v in graph.edges:
        for key in [k for k, value in graph.edges[u, v].items() if value is None]:
            del graph.edges[u, v][key]
    return graph


def graph_to_graphml(graph):
    """Serialize a networkx graph to a GraphML document, nodes and edges in insertion order"""
    return "\n".join(nx.generate_graphml(_drop_none_attributes(graph))) + "\n"


def write_graphml(graph, filename):
    document = graph_to_graphml(graph)
    with open(filename, "w", encoding="utf-8") as f:
        f.write(document)
    logger.debug("Wrote GraphML to {}", filename)
    return document


def networkx_to_json(graph):
    """Convert a networkx graph to a json object"""
    graph_json = json_graph.node_link_data(graph, edges="edges")
    return graph_json


def write_networkx_to_json(graph, filename):
    """Convert a networkx graph to a json object and write it"""
    graph_json = networkx_to_json(graph)
    with open(filename, "w", encoding="utf-8") as f:
        json.dump(graph_json, f, indent=2)
    logger.debug("Wrote node-link JSON to {}", filename)
    return graph_json


def write_graph(graph, output_file, graph_format="graphml"):
    """
    Write a graph in the requested format.

    Args:
        graph: networkx graph
        output_file: target path; the extension is replaced per format
        graph_format: "graphml", "json" or "all"

    Returns:
        list of written paths
    """
    if graph_format not in GRAPH_FORMATS:
        raise ValueError(f"Unknown graph format '{graph_format}'")
    stem = os.path.splitext(str(output_file))[0]
    written = []
    if graph_format == "all" or graph_format == "graphml":
        write_graphml(graph, stem + ".graphml")
        written.append(stem + ".graphml")
    if graph_format == "all" or graph_format == "json":
        write_networkx_to_json(graph, stem + ".json")
        written.append(stem + ".json")
    return written
