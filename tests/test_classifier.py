"""Tests for Owned/Referenced classification and dependency order."""

import pytest

from declviews.codeviews.classifier import Ownership, TypeClassifier
from declviews.errors import DiagnosticKind, InvalidOwnershipCycle
from declviews.model import SymbolTable, unit_from_dict


def classify_records(*declarations):
    table = SymbolTable.merge([unit_from_dict({"unit": "u", "declarations": list(declarations)})])
    return table, TypeClassifier(table).classify()


class TestClassMembers:
    def test_pointer_and_reference_to_forward_types_are_referenced(self, class_members_symbols):
        classification = TypeClassifier(class_members_symbols).classify()
        for field_name in ("fwd_ptr", "fwd_ref", "fwd_decl"):
            edge = classification.of_field("ToForward", field_name)
            assert edge.ownership == Ownership.REFERENCED
            assert edge.resolved

    def test_by_value_field_of_defined_type_is_owned(self, class_members_symbols):
        classification = TypeClassifier(class_members_symbols).classify()
        assert classification.of_field("ToImpl", "impl").ownership == Ownership.OWNED
        assert classification.of_field("ToImpl", "impl_ptr").ownership == Ownership.REFERENCED
        assert classification.of_field("ToImpl", "impl_ref").ownership == Ownership.REFERENCED

    def test_primitive_field_produces_no_edge(self, class_members_symbols):
        classification = TypeClassifier(class_members_symbols).classify()
        assert classification.of_field("ToPrimitive", "x") is None
        assert classification.edges_from("ToPrimitive") == []

    def test_owned_target_is_ordered_before_dependent(self, class_members_symbols):
        classification = TypeClassifier(class_members_symbols).classify()
        order = list(classification.order)
        assert order.index("Impl") < order.index("ToImpl")
        assert set(order) == {d.name for d in class_members_symbols}

    def test_order_is_deterministic(self, class_members_symbols):
        first = TypeClassifier(class_members_symbols).classify().order
        second = TypeClassifier(class_members_symbols).classify().order
        assert first == second

    def test_no_diagnostics_for_valid_header(self, class_members_symbols):
        TypeClassifier(class_members_symbols).classify()
        assert not class_members_symbols.diagnostics


class TestEdgeCases:
    def test_unresolved_field_type_is_referenced_and_reported(self):
        table, classification = classify_records(
            {"name": "Holder", "fields": [{"name": "m", "type": "Missing"}]}
        )
        edge = classification.of_field("Holder", "m")
        assert edge.ownership == Ownership.REFERENCED
        assert not edge.resolved
        assert table.diagnostics.of_kind(DiagnosticKind.UNRESOLVED_REFERENCE)

    def test_by_value_use_of_forward_only_type_is_referenced(self):
        table, classification = classify_records(
            {"name": "Fwd", "fully_defined": False},
            {"name": "Holder", "fields": [{"name": "m", "type": "Fwd"}]},
        )
        assert classification.of_field("Holder", "m").ownership == Ownership.REFERENCED
        assert len(table.diagnostics) == 1

    def test_base_class_is_owned(self):
        _, classification = classify_records(
            {"name": "Derived", "bases": ["Base"]},
            {"name": "Base"},
        )
        assert classification.of_base("Derived", "Base").ownership == Ownership.OWNED
        assert classification.order == ("Base", "Derived")

    def test_parameters_and_returns_are_classified(self):
        table, classification = classify_records(
            {"name": "Value"},
            {"name": "Api", "kind": "interface", "methods": [
                {"name": "take", "return": "Value", "params": ["const Value&", "int"], "pure_virtual": True},
            ]},
        )
        api = table.get("Api")
        assert classification.of_parameter(api, 0, 0).ownership == Ownership.REFERENCED
        assert classification.of_parameter(api, 0, 1) is None
        assert classification.of_return(api, 0).ownership == Ownership.OWNED

    def test_owned_cycle_is_fatal(self):
        with pytest.raises(InvalidOwnershipCycle) as excinfo:
            classify_records(
                {"name": "A", "fields": [{"name": "b", "type": "B"}]},
                {"name": "B", "fields": [{"name": "a", "type": "A"}]},
            )
        assert set(excinfo.value.cycle) == {"A", "B"}

    def test_self_embedding_is_fatal(self):
        with pytest.raises(InvalidOwnershipCycle):
            classify_records({"name": "A", "fields": [{"name": "a", "type": "A"}]})

    def test_referenced_cycle_is_legal(self):
        _, classification = classify_records(
            {"name": "A", "fields": [{"name": "b", "type": "B*"}]},
            {"name": "B", "fields": [{"name": "a", "type": "A*"}]},
        )
        assert classification.order == ("A", "B")

    def test_method_returning_own_type_by_value_is_not_a_cycle(self):
        _, classification = classify_records(
            {"name": "Clone", "methods": [{"name": "clone", "return": "Clone", "const": True}]},
        )
        assert classification.order == ("Clone",)

    def test_relationship_graph(self):
        _, classification = classify_records(
            {"name": "Fwd", "fully_defined": False},
            {"name": "Impl"},
            {"name": "User", "fields": [
                {"name": "impl", "type": "Impl"},
                {"name": "fwd", "type": "Fwd*"},
                {"name": "ghost", "type": "Ghost&"},
            ]},
        )
        graph = classification.graph
        assert graph.edges["User", "Impl"]["ownership"] == "owned"
        assert graph.edges["User", "Fwd"]["ownership"] == "referenced"
        assert graph.nodes["Fwd"]["kind"] == "forward"
        assert graph.nodes["Ghost"]["kind"] == "opaque"
