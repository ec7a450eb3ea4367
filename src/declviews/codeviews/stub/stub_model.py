"""Records describing a generated test double, independent of how it is rendered."""
from __future__ import annotations

import enum
from dataclasses import dataclass

from ...model.declarations import Method, Parameter, SemanticType, TypeKind


class ReturnKind(enum.Enum):
    VOID = "void"
    VALUE = "value"
    REFERENCE = "reference"
    INTERFACE_REFERENCE = "interface_reference"
    INTERFACE_POINTER = "interface_pointer"

    @property
    def returns_interface(self):
        return self in (ReturnKind.INTERFACE_REFERENCE, ReturnKind.INTERFACE_POINTER)


@dataclass(frozen=True)
class CallbackInterface:
    """Single-method interface a test implements to override one behavior"""

    name: str
    method: str
    parameters: tuple[Parameter, ...]
    return_type: SemanticType


@dataclass(frozen=True)
class InstrumentedMethod:
    accessor: str
    declaring: str
    method: Method
    return_kind: ReturnKind
    callback: CallbackInterface
    nested: str | None = None

    @property
    def name(self):
        return self.method.name

    @property
    def mangled(self):
        return self.method.mangled_name()

    @property
    def is_void(self):
        return self.return_kind == ReturnKind.VOID

    @property
    def param_slots(self):
        return tuple(f"param_x{index}" for index in range(len(self.method.parameters)))

    def stored_param_type(self, index):
        """Type a counter slot keeps for parameter ``index``; references are kept by address"""
        param_type = self.method.parameters[index].type
        if param_type.kind == TypeKind.REFERENCE:
            return SemanticType.pointer(param_type.inner)
        return param_type.strip_const()

    def static_return_type(self):
        """Type held by the static-return slot, None for void methods"""
        return_type = self.method.return_type
        if self.is_void:
            return None
        if self.return_kind.returns_interface:
            return SemanticType.pointer(return_type.inner)
        if self.return_kind == ReturnKind.REFERENCE:
            return return_type.inner.strip_const()
        return return_type.strip_const()


@dataclass(frozen=True)
class PassthroughMethod:
    """Pure-virtual special member overridden without instrumentation"""

    declaring: str
    method: Method


@dataclass(frozen=True)
class StubDeclaration:
    interface: str
    name: str
    suffix: str
    prefix: str = "Stub"
    methods: tuple[InstrumentedMethod, ...] = ()
    passthrough: tuple[PassthroughMethod, ...] = ()
    nested: tuple[str, ...] = ()
    unresolved_bases: tuple[str, ...] = ()

    @property
    def callback_namespace(self):
        return f"{self.prefix}Callback{self.suffix}"

    @property
    def counter_namespace(self):
        return f"{self.prefix}Counter{self.suffix}"

    @property
    def static_namespace(self):
        return f"{self.prefix}Static{self.suffix}"

    @property
    def internal_namespace(self):
        return f"{self.prefix}Internal{self.suffix}"

    @property
    def returning_methods(self):
        return tuple(m for m in self.methods if not m.is_void)

    @property
    def nesting_methods(self):
        return tuple(m for m in self.methods if m.nested is not None)

    def method(self, accessor):
        """Look up an instrumented method by accessor or by mangled name"""
        for candidate in self.methods:
            if candidate.accessor == accessor:
                return candidate
        for candidate in self.methods:
            if candidate.mangled == accessor:
                return candidate
        raise KeyError(accessor)

    def methods_named(self, name):
        return [m for m in self.methods if m.name == name]
