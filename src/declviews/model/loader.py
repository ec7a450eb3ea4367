"""
Reading front-end translation units.

The C++ front-end emits one JSON document per unit. Units are independent
until their declarations meet in the symbol table, so files are read in
parallel and merged afterwards in the order they were given.
"""
from __future__ import annotations

import json
import re
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from loguru import logger

from ..errors import UnitFormatError
from ..utils.cpp_nodes import control_constructs, is_primitive_spelling, type_words, visibility_types
from .declarations import (
    CallSite,
    Declaration,
    DeclKind,
    Field,
    FunctionBody,
    Method,
    Parameter,
    SemanticType,
    TranslationUnit,
    Visibility,
    special_member_kind,
)

_TOKEN_RE = re.compile(r"(?:::)?[A-Za-z_]\w*(?:::[A-Za-z_]\w*)*|\*|&")


def parse_type(spelling):
    """
    Parse a resolved C++ type spelling.

    'const MadeUp** const' -> Pointer(const, Pointer(Named(MadeUp, const)))
    """
    tokens = _TOKEN_RE.findall(spelling)
    if not tokens:
        raise UnitFormatError(f"Empty type spelling '{spelling}'")

    base_words = []
    is_const = False
    index = 0
    while index < len(tokens) and tokens[index] not in ("*", "&"):
        token = tokens[index]
        if token in type_words["type_qualifier"]:
            is_const = is_const or token == "const"
        elif token not in type_words["elaborated_keyword"]:
            base_words.append(token)
        index += 1

    if not base_words:
        raise UnitFormatError(f"Type spelling '{spelling}' names no type")
    if is_primitive_spelling(base_words):
        current = SemanticType.primitive(" ".join(base_words), is_const=is_const)
    elif len(base_words) == 1:
        current = SemanticType.named(base_words[0], is_const=is_const)
    else:
        raise UnitFormatError(f"Cannot parse type spelling '{spelling}'")

    for token in tokens[index:]:
        if token == "*":
            current = SemanticType.pointer(current)
        elif token == "&":
            current = SemanticType.reference(current)
        elif token == "const":
            current = SemanticType(current.kind, current.name, current.inner, True)
        elif token != "volatile":
            raise UnitFormatError(f"Unexpected '{token}' in type spelling '{spelling}'")
    return current


def type_from_json(value):
    if isinstance(value, str):
        return parse_type(value)
    if not isinstance(value, dict):
        raise UnitFormatError(f"Type must be a string or an object, got {value!r}")
    is_const = bool(value.get("const", False))
    if "primitive" in value:
        return SemanticType.primitive(value["primitive"], is_const=is_const)
    if "named" in value:
        return SemanticType.named(value["named"], is_const=is_const)
    if "pointer" in value:
        return SemanticType.pointer(type_from_json(value["pointer"]), is_const=is_const)
    if "reference" in value:
        return SemanticType.reference(type_from_json(value["reference"]))
    raise UnitFormatError(f"Unknown type record {value!r}")


def _parameter(value):
    if isinstance(value, str):
        return Parameter(type=parse_type(value))
    return Parameter(type=type_from_json(value["type"]), name=value.get("name"))


def _method(value):
    return_value = value.get("return")
    visibility = value.get("visibility", "public")
    if visibility not in visibility_types:
        raise UnitFormatError(f"Unknown visibility in method '{value.get('name')}'")
    return Method(
        name=value["name"],
        parameters=tuple(_parameter(p) for p in value.get("params", [])),
        return_type=type_from_json(return_value) if return_value is not None else None,
        is_pure_virtual=bool(value.get("pure_virtual", False)),
        is_const=bool(value.get("const", False)),
        visibility=Visibility(visibility),
    )


def infer_kind(name, methods):
    """An interface is a class whose every ordinary method is pure virtual"""
    candidate = Declaration(name=name, methods=tuple(methods))
    ordinary = [m for m in methods if special_member_kind(candidate, m) is None]
    if ordinary and all(m.is_pure_virtual for m in ordinary):
        return DeclKind.INTERFACE
    return DeclKind.CLASS


def declaration_from_json(value, unit=None):
    name = value["name"]
    methods = [_method(m) for m in value.get("methods", [])]
    fields = tuple(
        Field(name=f["name"], type=type_from_json(f["type"]), owner=name)
        for f in value.get("fields", [])
    )
    if "kind" in value:
        try:
            kind = DeclKind(value["kind"])
        except ValueError as exc:
            raise UnitFormatError(f"Unknown declaration kind in '{name}'") from exc
    else:
        kind = infer_kind(name, methods)
    return Declaration(
        name=name,
        kind=kind,
        bases=tuple(value.get("bases", [])),
        methods=tuple(methods),
        fields=fields,
        is_fully_defined=bool(value.get("fully_defined", True)),
        unit=unit,
    )


def call_from_json(value):
    if isinstance(value, str):
        return CallSite(callee=value)
    unknown = [c for c in value.get("constructs", []) if c not in control_constructs]
    if unknown:
        raise UnitFormatError(f"Unknown control construct(s) {unknown} around call of '{value['callee']}'")
    return CallSite(
        callee=value["callee"],
        constructs=tuple(value.get("constructs", [])),
        arguments=tuple(call_from_json(a) for a in value.get("arguments", [])),
    )


def body_from_json(value, unit=None):
    return FunctionBody(
        name=value["name"],
        kind=value.get("kind", "method" if "::" in value["name"] else "function"),
        calls=tuple(call_from_json(c) for c in value.get("calls", [])),
        unit=unit,
    )


def unit_from_dict(payload, default_name=None):
    if not isinstance(payload, dict):
        raise UnitFormatError("Translation unit document must be a JSON object")
    name = payload.get("unit", default_name)
    if not name:
        raise UnitFormatError("Translation unit document has no 'unit' name")
    try:
        return TranslationUnit(
            name=name,
            declarations=tuple(
                declaration_from_json(d, unit=name) for d in payload.get("declarations", [])
            ),
            bodies=tuple(body_from_json(b, unit=name) for b in payload.get("bodies", [])),
            header=payload.get("header"),
        )
    except KeyError as exc:
        raise UnitFormatError(f"Unit '{name}': missing required key {exc}") from exc


def load_unit(path):
    path = Path(path)
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise UnitFormatError(f"Cannot read translation unit {path}: {exc}") from exc
    unit = unit_from_dict(payload, default_name=path.stem)
    logger.debug("Loaded unit {} from {}", unit.name, path)
    return unit


def load_units(paths, workers=4):
    """Load units concurrently; the result keeps the order of ``paths``"""
    paths = [Path(p) for p in paths]
    if workers <= 1 or len(paths) <= 1:
        return [load_unit(p) for p in paths]
    with ThreadPoolExecutor(max_workers=workers) as pool:
        return list(pool.map(load_unit, paths))
