from .stub_driver import StubDriver
from .stub_emitter import StubEmitter
from .stub_generator import StubGenerator
from .stub_model import (
    CallbackInterface,
    InstrumentedMethod,
    PassthroughMethod,
    ReturnKind,
    StubDeclaration,
)
from .stub_runtime import TestDouble, create_double, stub_reset

__all__ = [
    "CallbackInterface",
    "InstrumentedMethod",
    "PassthroughMethod",
    "ReturnKind",
    "StubDeclaration",
    "StubDriver",
    "StubEmitter",
    "StubGenerator",
    "TestDouble",
    "create_double",
    "stub_reset",
]
