"""
Live Python test doubles built from StubDeclarations.

A TestDouble behaves exactly like the generated C++ double: every call bumps
the method's counter, stores its parameters, then delegates to the callback
slot when one is set and otherwise answers from the static-return slot.
Interface-typed returns fall back to a lazily created nested double.
"""
from __future__ import annotations

import copy
from dataclasses import dataclass, field

from ...model.declarations import TypeKind
from ...utils.cpp_nodes import primitive_default
from .stub_model import ReturnKind


@dataclass
class CallCounter:
    call_counter: int = 0
    params: tuple = ()

    def reset(self):
        self.call_counter = 0
        self.params = ()

    def __getattr__(self, name):
        # param_x0, param_x1, ... mirror the generated counter structs
        if name.startswith("param_x") and name[len("param_x"):].isdigit():
            index = int(name[len("param_x"):])
            params = self.__dict__.get("params", ())
            return params[index] if index < len(params) else None
        raise AttributeError(name)


@dataclass
class CallbackSlot:
    callback: object = None

    def reset(self):
        self.callback = None


@dataclass
class StaticReturn:
    stub_return: object = None
    initial: object = field(default=None, repr=False)

    def reset(self):
        self.stub_return = self.initial


def stub_reset(accessor):
    """Restore one accessor object to its default state, siblings untouched"""
    accessor.reset()
    return accessor


def initial_return(method):
    """Value a static-return slot holds before a test sets it"""
    if method.return_kind.returns_interface or method.is_void:
        return None
    return_type = method.method.return_type
    if method.return_kind == ReturnKind.REFERENCE:
        return_type = return_type.inner
    if return_type.kind == TypeKind.PRIMITIVE:
        return primitive_default(return_type.name)
    return None


class AccessorNamespace:
    """Per-method accessor objects, reachable by attribute or by item"""

    def __init__(self, slots, aliases=None):
        self._slots = dict(slots)
        self._aliases = dict(aliases or {})

    def __getattr__(self, name):
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            return self[name]
        except KeyError:
            raise AttributeError(name) from None

    def __getitem__(self, name):
        return self._slots[self._aliases.get(name, name)]

    def __contains__(self, name):
        return self._aliases.get(name, name) in self._slots

    def __iter__(self):
        return iter(self._slots)

    def __len__(self):
        return len(self._slots)

    def reset_all(self):
        for slot in self._slots.values():
            slot.reset()


def _copy_argument(param_type, value):
    # reference parameters are kept by identity, like the address the C++ double stores
    if param_type.kind == TypeKind.REFERENCE:
        return value
    return copy.copy(value)


def _invoke_callback(callback, method_name, args):
    target = getattr(callback, method_name, None)
    if target is None and callable(callback):
        target = callback
    if target is None:
        raise TypeError(
            f"callback {callback!r} neither implements '{method_name}' nor is callable"
        )
    return target(*args)


class TestDouble:
    """
    Instrumented stand-in for one interface.

    Methods are callable by their C++ name. Overloads are told apart by
    argument count only; overloads of equal arity must be called through
    ``invoke(accessor, *args)``.

    Args:
        generator: the StubGenerator owning the memoized stubs
        stub: the StubDeclaration to realize
    """

    __test__ = False

    def __init__(self, generator, stub):
        self._generator = generator
        self.stub = stub
        accessors = {m.accessor for m in stub.methods}
        # a real accessor always wins over another method's mangled alias
        aliases = {m.mangled: m.accessor for m in stub.methods if m.mangled not in accessors}
        self.stub_counter = AccessorNamespace(
            ((m.accessor, CallCounter()) for m in stub.methods), aliases
        )
        self.stub_callback = AccessorNamespace(
            ((m.accessor, CallbackSlot()) for m in stub.methods), aliases
        )
        statics = []
        for method in stub.returning_methods:
            initial = initial_return(method)
            statics.append((method.accessor, StaticReturn(initial, initial)))
        self.stub_static = AccessorNamespace(statics, aliases)
        self._nested = {}

    @property
    def interface(self):
        return self.stub.interface

    def invoke(self, accessor, *args):
        method = self.stub.method(accessor)
        parameters = method.method.parameters
        if len(args) != len(parameters):
            raise TypeError(
                f"{self.stub.interface}::{method.name} takes {len(parameters)} "
                f"argument(s), {len(args)} given"
            )

        counter = self.stub_counter[method.accessor]
        counter.call_counter += 1
        counter.params = tuple(
            _copy_argument(param.type, value) for param, value in zip(parameters, args)
        )

        slot = self.stub_callback[method.accessor]
        if slot.callback is not None:
            result = _invoke_callback(slot.callback, method.callback.method, args)
            return None if method.is_void else result
        if method.is_void:
            return None

        value = self.stub_static[method.accessor].stub_return
        if method.return_kind.returns_interface and value is None:
            return self.stub_nested(method.accessor)
        return value

    def stub_nested(self, accessor):
        """Double returned by an interface-typed method, created on first use"""
        method = self.stub.method(accessor)
        if method.nested is None:
            raise KeyError(f"'{accessor}' does not return an interface")
        nested = self._nested.get(method.accessor)
        if nested is None:
            nested = create_double(self._generator, method.nested)
            self._nested[method.accessor] = nested
        return nested

    def stub_reset_all(self):
        self.stub_counter.reset_all()
        self.stub_callback.reset_all()
        self.stub_static.reset_all()

    def _dispatch(self, name):
        candidates = self.stub.methods_named(name)

        def call(*args):
            matching = [m for m in candidates if len(m.method.parameters) == len(args)]
            if len(matching) != 1:
                raise TypeError(
                    f"cannot select an overload of '{name}' for {len(args)} argument(s); "
                    f"use invoke() with one of "
                    f"{', '.join(m.accessor for m in candidates)}"
                )
            return self.invoke(matching[0].accessor, *args)

        call.__name__ = name
        return call

    def __getattr__(self, name):
        if name.startswith("_") or "stub" not in self.__dict__:
            raise AttributeError(name)
        if self.stub.methods_named(name):
            return self._dispatch(name)
        raise AttributeError(f"{self.stub.name} has no method '{name}'")

    def __repr__(self):
        return f"<TestDouble {self.stub.name} of {self.stub.interface}>"


def create_double(generator, name):
    """Live double of interface ``name``, generating its stub when needed"""
    return TestDouble(generator, generator.generate(name))
