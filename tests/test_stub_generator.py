"""Tests for building test double models from interfaces."""

import threading

import pytest

from declviews.codeviews.classifier import TypeClassifier
from declviews.codeviews.stub import ReturnKind, StubGenerator
from declviews.errors import DiagnosticKind, NotAnInterface
from declviews.model import SymbolTable, unit_from_dict


def generator_for(*declarations):
    table = SymbolTable.merge([unit_from_dict({"unit": "u", "declarations": list(declarations)})])
    return StubGenerator(table, TypeClassifier(table).classify())


def pure(name, ret="void", params=(), const=False):
    return {"name": name, "return": ret, "params": list(params), "pure_virtual": True, "const": const}


class TestIfs1:
    def test_overrides_every_pure_virtual_method_of_interface_and_bases(self, generator):
        stub = generator.generate("Ifs1")
        assert [m.accessor for m in stub.methods] == ["run", "get_ifc2", "get_ifc3", "ifs2_func1"]
        assert [m.declaring for m in stub.methods] == ["Ifs1", "Ifs1", "Ifs1", "Ifs2"]

    def test_names(self, generator):
        stub = generator.generate("Ifs1")
        assert stub.name == "StubIfs1"
        assert stub.callback_namespace == "StubCallbackIfs1"
        assert stub.counter_namespace == "StubCounterIfs1"
        assert stub.static_namespace == "StubStaticIfs1"
        assert stub.internal_namespace == "StubInternalIfs1"

    def test_return_kinds(self, generator):
        stub = generator.generate("Ifs1")
        assert stub.method("run").return_kind == ReturnKind.VOID
        assert stub.method("ifs2_func1").return_kind == ReturnKind.VALUE
        assert stub.method("get_ifc3").return_kind == ReturnKind.INTERFACE_REFERENCE
        assert stub.method("get_ifc3").nested == "Ifs3"

    def test_lookup_by_mangled_name(self, generator):
        stub = generator.generate("Ifs1")
        assert stub.method("ifs2_func1_int_char") is stub.method("ifs2_func1")

    def test_callback_interface_mirrors_signature(self, generator):
        callback = generator.generate("Ifs1").method("ifs2_func1").callback
        assert callback.name == "Iifs2_func1"
        assert callback.method == "ifs2_func1"
        assert [p.type.spelling() for p in callback.parameters] == ["int", "char"]
        assert callback.return_type.spelling() == "int"

    def test_nested_interfaces_are_stubbed_once(self, generator):
        generator.generate("Ifs1")
        assert len(generator) == 3
        assert "Ifs2" in generator and "Ifs3" in generator
        first = generator.generate("Ifs3")
        assert generator.generate("Ifs3") is first

    def test_generate_all_follows_dependency_order(self, generator):
        assert [s.interface for s in generator.generate_all()] == ["Ifs3", "Ifs2", "Ifs1"]

    def test_class_is_not_an_interface(self, class_members_symbols):
        generator = StubGenerator(class_members_symbols)
        with pytest.raises(NotAnInterface):
            generator.generate("ToImpl")

    def test_unknown_name_is_not_an_interface(self, generator):
        with pytest.raises(NotAnInterface):
            generator.generate("Nope")


class TestFlattening:
    def test_diamond_instruments_shared_method_once(self):
        generator = generator_for(
            {"name": "Root", "kind": "interface", "methods": [pure("ping")]},
            {"name": "Left", "kind": "interface", "bases": ["Root"], "methods": [pure("left")]},
            {"name": "Right", "kind": "interface", "bases": ["Root"], "methods": [pure("right")]},
            {"name": "Both", "kind": "interface", "bases": ["Left", "Right"], "methods": [pure("both")]},
        )
        stub = generator.generate("Both")
        assert [m.accessor for m in stub.methods] == ["both", "left", "ping", "right"]

    def test_overloads_get_mangled_accessors(self):
        generator = generator_for(
            {"name": "Io", "kind": "interface", "methods": [
                pure("write", params=["int"]),
                pure("write", params=["const char*", "size_t"]),
                pure("flush"),
            ]},
        )
        stub = generator.generate("Io")
        assert [m.accessor for m in stub.methods] == ["write_int", "write_const_char_ptr_size_t", "flush"]

    def test_mangled_overload_never_reuses_another_accessor(self):
        generator = generator_for(
            {"name": "I", "kind": "interface", "methods": [
                pure("foo"),
                pure("foo", params=["int"]),
                pure("foo_int"),
            ]},
        )
        stub = generator.generate("I")
        assert [m.accessor for m in stub.methods] == ["foo", "foo_int_2", "foo_int"]
        assert [m.callback.name for m in stub.methods] == ["Ifoo", "Ifoo_int_2", "Ifoo_int"]
        assert stub.method("foo_int").method.parameters == ()

    def test_operator_assignment_is_passed_through(self):
        generator = generator_for(
            {"name": "Simple", "kind": "interface", "methods": [
                {"name": "Simple", "return": None},
                {"name": "~Simple", "return": None},
                pure("func1"),
                pure("operator=", params=["const Simple&"]),
                {**pure("func3", ret="char*"), "visibility": "private"},
            ]},
        )
        stub = generator.generate("Simple")
        assert [m.accessor for m in stub.methods] == ["func1", "func3"]
        assert [p.method.name for p in stub.passthrough] == ["operator="]

    def test_unresolved_base_is_recorded(self):
        generator = generator_for(
            {"name": "Partial", "kind": "interface", "bases": ["Elsewhere"], "methods": [pure("f")]},
        )
        stub = generator.generate("Partial")
        assert stub.unresolved_bases == ("Elsewhere",)
        assert generator.diagnostics.of_kind(DiagnosticKind.UNRESOLVED_REFERENCE)

    def test_pointer_to_interface_return(self):
        generator = generator_for(
            {"name": "Leaf", "kind": "interface", "methods": [pure("x")]},
            {"name": "Tree", "kind": "interface", "methods": [pure("leaf", ret="Leaf*")]},
        )
        method = generator.generate("Tree").method("leaf")
        assert method.return_kind == ReturnKind.INTERFACE_POINTER
        assert method.static_return_type().spelling() == "Leaf*"

    def test_reference_to_class_return(self):
        generator = generator_for(
            {"name": "Config"},
            {"name": "Source", "kind": "interface", "methods": [pure("config", ret="const Config&", const=True)]},
        )
        method = generator.generate("Source").method("config")
        assert method.return_kind == ReturnKind.REFERENCE
        assert method.static_return_type().spelling() == "Config"


class TestCyclicReturns:
    def setup_method(self):
        self.generator = generator_for(
            {"name": "A", "kind": "interface", "methods": [pure("b", ret="B&")]},
            {"name": "B", "kind": "interface", "methods": [pure("a", ret="A&")]},
        )

    def test_both_stubs_generated_exactly_once(self):
        stub_a = self.generator.generate("A")
        assert len(self.generator) == 2
        assert self.generator.generate("B").method("a").nested == "A"
        assert self.generator.generate("A") is stub_a

    def test_concurrent_generation_collapses_to_one_owner(self):
        results = []
        barrier = threading.Barrier(4)

        def work():
            barrier.wait()
            results.append(self.generator.generate("A"))

        threads = [threading.Thread(target=work) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        assert all(stub is results[0] for stub in results)
        assert len(self.generator) == 2

    def test_generate_all_with_workers(self):
        stubs = self.generator.generate_all(["A", "B"], workers=2)
        assert [s.interface for s in stubs] == ["A", "B"]
