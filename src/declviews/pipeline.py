from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import networkx as nx
from loguru import logger

from .codeviews.callgraph import CallGraphDriver
from .codeviews.classifier import Classification, TypeClassifier
from .codeviews.stub import StubDriver, StubGenerator, create_double
from .config import DEFAULT_PROPERTIES, merge_properties
from .errors import Diagnostics
from .model import SymbolTable, load_units

VIEWS = ("stub", "callgraph")


@dataclass
class RunResult:
    symbols: SymbolTable
    classification: Classification
    diagnostics: Diagnostics
    generator: StubGenerator | None = None
    stubs: list = field(default_factory=list)
    stub_source: str | None = None
    call_graph: nx.DiGraph | None = None
    artifacts: list[Path] = field(default_factory=list)

    def create_double(self, name):
        if self.generator is None:
            raise RuntimeError("the stub view was not part of this run")
        return create_double(self.generator, name)


def run_pipeline(
    units,
    *,
    views=VIEWS,
    interfaces=None,
    properties: dict | None = None,
    output_dir: Path | None = None,
) -> RunResult:
    """
    Merge, classify, generate and emit as one batch.

    Fatal errors (DeclViewsError subclasses) propagate and abort the run.
    Recoverable problems are collected in ``RunResult.diagnostics``.
    """
    unknown = [v for v in views if v not in VIEWS]
    if unknown:
        raise ValueError(f"Unknown view(s): {', '.join(unknown)}")
    properties = merge_properties(DEFAULT_PROPERTIES, properties or {})
    units = list(units)

    diagnostics = Diagnostics()
    symbols = SymbolTable.merge(units, diagnostics)
    classification = TypeClassifier(symbols, diagnostics).classify()
    result = RunResult(symbols=symbols, classification=classification, diagnostics=diagnostics)

    if output_dir is not None:
        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)

    if "stub" in views:
        stub_properties = properties["stub"]
        output_file = None
        if output_dir is not None:
            output_file = output_dir / f"{stub_properties['basename']}.hpp"
        driver = StubDriver(
            symbols,
            classification,
            interfaces=interfaces,
            output_file=output_file,
            properties=stub_properties,
        )
        result.generator = driver.generator
        result.stubs = driver.stubs
        result.stub_source = driver.source
        if output_file is not None:
            result.artifacts.append(output_file)

    if "callgraph" in views:
        output_file = None
        if output_dir is not None:
            output_file = output_dir / "callgraph.graphml"
        driver = CallGraphDriver(
            symbols,
            classification,
            output_file=output_file,
            properties=properties["callgraph"],
        )
        result.call_graph = driver.graph
        result.artifacts.extend(Path(p) for p in driver.written)

    logger.info(
        "Run finished over {} unit(s): {} artifact(s), {} diagnostic(s)",
        len(units), len(result.artifacts), len(diagnostics),
    )
    return result


def run_files(paths, **kwargs) -> RunResult:
    """Load unit documents concurrently, then run the pipeline over them"""
    properties = merge_properties(DEFAULT_PROPERTIES, kwargs.get("properties") or {})
    units = load_units(paths, workers=properties["loader"]["workers"])
    return run_pipeline(units, **kwargs)
