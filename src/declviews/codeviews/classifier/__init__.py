from .classifier import (
    Classification,
    ClassificationEdge,
    Ownership,
    TypeClassifier,
    classify,
)

__all__ = [
    "Classification",
    "ClassificationEdge",
    "Ownership",
    "TypeClassifier",
    "classify",
]
