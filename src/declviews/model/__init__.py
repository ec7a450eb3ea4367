"""Declaration model, global symbol table and front-end unit loading."""

from .declarations import (
    CallSite,
    Declaration,
    DeclKind,
    Field,
    FunctionBody,
    Method,
    Parameter,
    SemanticType,
    SpecialMember,
    TranslationUnit,
    TypeKind,
    Visibility,
    special_member_kind,
    validate_declaration,
)
from .loader import load_unit, load_units, parse_type, unit_from_dict
from .symbol_table import SymbolTable

__all__ = [
    "CallSite",
    "DeclKind",
    "Declaration",
    "Field",
    "FunctionBody",
    "Method",
    "Parameter",
    "SemanticType",
    "SpecialMember",
    "SymbolTable",
    "TranslationUnit",
    "TypeKind",
    "Visibility",
    "load_unit",
    "load_units",
    "parse_type",
    "special_member_kind",
    "unit_from_dict",
    "validate_declaration",
]
