from .callgraph import CallGraph, build_call_graph, callees, callers, overlay_types
from .callgraph_driver import CallGraphDriver

__all__ = [
    "CallGraph",
    "CallGraphDriver",
    "build_call_graph",
    "callees",
    "callers",
    "overlay_types",
]
