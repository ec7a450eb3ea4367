"""
Renders StubDeclarations as one C++ header.

Per stub, in dependency order: callback interfaces and slots, counter
structs, static-return structs, the internal aggregates and StubInit, then
the double class. Member definitions follow all classes so nested doubles
are complete where they are created.
"""
from __future__ import annotations

import re

from ...model.declarations import SemanticType, TypeKind
from ...utils.cpp_nodes import sanitize_identifier
from .stub_model import ReturnKind

INDENT = "    "


def include_line(header):
    if header.startswith("<"):
        return f"#include {header}"
    return f'#include "{header}"'


def guard_name(basename):
    return re.sub(r"[^0-9A-Za-z]+", "_", basename).strip("_").upper() + "_HPP"


def parameter_list(parameters, spell=SemanticType.spelling):
    return ", ".join(f"{spell(p.type)} x{index}" for index, p in enumerate(parameters))


def argument_list(parameters):
    return ", ".join(f"x{index}" for index in range(len(parameters)))


def method_signature(method, qualifier="", spell=SemanticType.spelling):
    parameters = parameter_list(method.parameters, spell)
    text = f"{spell(method.return_type)} {qualifier}{method.name}({parameters})"
    if method.is_const:
        text += " const"
    return text


class StubEmitter:
    """
    Args:
        symbols: the merged SymbolTable, used for the headers to include and
            to qualify type names as the declaring scope resolves them
        diagnostics: Diagnostics listed in the leading comment block
        properties: the "stub" properties section
    """

    def __init__(self, symbols=None, diagnostics=None, properties=None):
        self.symbols = symbols
        self.diagnostics = diagnostics
        self.properties = properties if properties is not None else {}

    def includes(self, stubs):
        headers = []
        if self.symbols is not None:
            for stub in stubs:
                header = self.symbols.header_of(stub.interface)
                if header and header not in headers:
                    headers.append(header)
        extra = self.properties.get("includes") or []
        if isinstance(extra, str):
            extra = [h.strip() for h in extra.split(",") if h.strip()]
        for header in extra:
            if header not in headers:
                headers.append(header)
        return headers

    def speller(self, context):
        """Spelling function writing Named types as resolved from ``context``"""

        def rename(name):
            declaration = self.symbols.resolve(name, context=context)
            return name if declaration is None else declaration.name

        def spell(semantic_type):
            if self.symbols is not None:
                semantic_type = semantic_type.with_names(rename)
            return semantic_type.spelling()

        return spell

    def render(self, stubs):
        basename = self.properties.get("basename", "stub")
        guard = self.properties.get("guard") or guard_name(basename)
        lines = ["// Generated by declviews. Do not edit."]
        if self.diagnostics:
            lines.append("//")
            lines.append("// Diagnostics:")
            lines.extend(f"//   {diagnostic}" for diagnostic in self.diagnostics)
        lines += ["", f"#ifndef {guard}", f"#define {guard}", ""]
        headers = self.includes(stubs)
        if headers:
            lines.extend(include_line(h) for h in headers)
            lines.append("")

        if stubs:
            lines.extend(f"class {stub.name};" for stub in stubs)
            lines.append("")
        for stub in stubs:
            lines.extend(self.render_declaration(stub))
        for stub in stubs:
            lines.extend(self.render_definitions(stub))
        lines.append(f"#endif // {guard}")
        return "\n".join(lines) + "\n"

    def render_declaration(self, stub):
        lines = [f"// Test double of {stub.interface}"]
        for base in stub.unresolved_bases:
            lines.append(f"// unresolved base: {base}")
        lines += self.render_callbacks(stub)
        lines += self.render_counters(stub)
        lines += self.render_statics(stub)
        lines += self.render_internal(stub)
        lines += self.render_class(stub)
        return lines

    def render_callbacks(self, stub):
        lines = [f"namespace {stub.callback_namespace} {{"]
        for method in stub.methods:
            callback = method.callback
            spell = self.speller(method.declaring)
            lines += [
                f"struct {callback.name} {{",
                f"{INDENT}virtual ~{callback.name}() {{}}",
                f"{INDENT}virtual {spell(callback.return_type)} {callback.method}"
                f"({parameter_list(callback.parameters, spell)}) = 0;",
                "};",
                f"struct {method.accessor}_t {{",
                f"{INDENT}{callback.name}* callback;",
                "};",
            ]
        lines += [f"}} // namespace {stub.callback_namespace}", ""]
        return lines

    def render_counters(self, stub):
        lines = [f"namespace {stub.counter_namespace} {{"]
        for method in stub.methods:
            lines.append(f"struct {method.accessor}_t {{")
            lines.append(f"{INDENT}unsigned call_counter;")
            spell = self.speller(method.declaring)
            for index, slot in enumerate(method.param_slots):
                lines.append(f"{INDENT}{spell(method.stored_param_type(index))} {slot};")
            lines.append("};")
        lines += [f"}} // namespace {stub.counter_namespace}", ""]
        return lines

    def render_statics(self, stub):
        lines = [f"namespace {stub.static_namespace} {{"]
        for method in stub.returning_methods:
            spell = self.speller(method.declaring)
            lines += [
                f"struct {method.accessor}_t {{",
                f"{INDENT}{spell(method.static_return_type())} stub_return;",
                "};",
            ]
        lines += [f"}} // namespace {stub.static_namespace}", ""]
        return lines

    def render_internal(self, stub):
        lines = [
            f"namespace {stub.internal_namespace} {{",
            "template<typename T>",
            "void StubInit(T* value) {",
            f"{INDENT}*value = T();",
            "}",
            "",
        ]
        aggregates = (
            ("StubCounter", stub.counter_namespace, stub.methods),
            ("StubCallback", stub.callback_namespace, stub.methods),
            ("StubStatic", stub.static_namespace, stub.returning_methods),
        )
        for aggregate, namespace, methods in aggregates:
            lines.append(f"struct {aggregate} {{")
            for method in methods:
                lines.append(
                    f"{INDENT}{namespace}::{method.accessor}_t& {method.accessor}() "
                    f"{{ return {method.accessor}_; }}"
                )
            for method in methods:
                lines.append(f"{INDENT}{namespace}::{method.accessor}_t {method.accessor}_;")
            lines += ["};", ""]
        lines += [f"}} // namespace {stub.internal_namespace}", ""]
        return lines

    def render_class(self, stub):
        internal = stub.internal_namespace
        lines = [
            f"class {stub.name} : public {stub.interface} {{",
            "public:",
            f"{INDENT}{stub.name}();",
            f"{INDENT}virtual ~{stub.name}();",
            "",
            f"{INDENT}{internal}::StubCounter& StubGetCounter();",
            f"{INDENT}{internal}::StubCallback& StubGetCallback();",
            f"{INDENT}{internal}::StubStatic& StubGetStatic();",
            "",
        ]
        for method in stub.methods:
            spell = self.speller(method.declaring)
            lines.append(f"{INDENT}{method_signature(method.method, spell=spell)};")
        for passthrough in stub.passthrough:
            spell = self.speller(passthrough.declaring)
            lines.append(f"{INDENT}{method_signature(passthrough.method, spell=spell)};")
        for method in stub.nesting_methods:
            lines.append(f"{INDENT}{self.nested_name(stub, method)}& StubNested_{method.accessor}() const;")
        lines += [
            "",
            "private:",
            f"{INDENT}{stub.name}(const {stub.name}& other);",
            f"{INDENT}{stub.name}& operator=(const {stub.name}& other);",
            "",
            f"{INDENT}mutable {internal}::StubCounter stub_counter;",
            f"{INDENT}mutable {internal}::StubCallback stub_callback;",
            f"{INDENT}mutable {internal}::StubStatic stub_static;",
        ]
        for method in stub.nesting_methods:
            lines.append(f"{INDENT}mutable {self.nested_name(stub, method)}* stub_nested_{method.accessor};")
        lines += ["};", ""]
        return lines

    def nested_name(self, stub, method):
        return stub.prefix + sanitize_identifier(method.nested)

    def render_definitions(self, stub):
        owner = f"{stub.name}::"
        internal = stub.internal_namespace
        initializers = ["stub_counter()", "stub_callback()", "stub_static()"]
        initializers += [f"stub_nested_{m.accessor}(0)" for m in stub.nesting_methods]
        lines = [
            f"inline {owner}{stub.name}() : {', '.join(initializers)} {{",
            "}",
            "",
            f"inline {owner}~{stub.name}() {{",
        ]
        lines += [f"{INDENT}delete stub_nested_{m.accessor};" for m in stub.nesting_methods]
        lines += ["}", ""]
        for aggregate, getter, member in (
            ("StubCounter", "StubGetCounter", "stub_counter"),
            ("StubCallback", "StubGetCallback", "stub_callback"),
            ("StubStatic", "StubGetStatic", "stub_static"),
        ):
            lines += [
                f"inline {internal}::{aggregate}& {owner}{getter}() {{",
                f"{INDENT}return {member};",
                "}",
                "",
            ]
        for method in stub.methods:
            lines += self.render_override(stub, method)
        for passthrough in stub.passthrough:
            lines += self.render_passthrough(stub, passthrough)
        for method in stub.nesting_methods:
            nested = self.nested_name(stub, method)
            member = f"stub_nested_{method.accessor}"
            lines += [
                f"inline {nested}& {owner}StubNested_{method.accessor}() const {{",
                f"{INDENT}if ({member} == 0) {{",
                f"{INDENT * 2}{member} = new {nested};",
                f"{INDENT}}}",
                f"{INDENT}return *{member};",
                "}",
                "",
            ]
        return lines

    def render_override(self, stub, method):
        accessor = method.accessor
        parameters = method.method.parameters
        counter = f"stub_counter.{accessor}()"
        callback = f"stub_callback.{accessor}().callback"
        static = f"stub_static.{accessor}().stub_return"
        call = f"{callback}->{method.callback.method}({argument_list(parameters)})"

        spell = self.speller(method.declaring)
        lines = [f"inline {method_signature(method.method, stub.name + '::', spell)} {{"]
        lines.append(f"{INDENT}{counter}.call_counter++;")
        for index, slot in enumerate(method.param_slots):
            stored = f"&x{index}" if parameters[index].type.kind == TypeKind.REFERENCE else f"x{index}"
            lines.append(f"{INDENT}{counter}.{slot} = {stored};")
        lines.append(f"{INDENT}if ({callback} != 0) {{")
        if method.is_void:
            lines.append(f"{INDENT * 2}{call};")
            lines += [f"{INDENT}}}", "}", ""]
            return lines
        lines.append(f"{INDENT * 2}return {call};")
        lines.append(f"{INDENT}}}")
        if method.return_kind == ReturnKind.INTERFACE_REFERENCE:
            lines += [
                f"{INDENT}if ({static} != 0) {{",
                f"{INDENT * 2}return *{static};",
                f"{INDENT}}}",
                f"{INDENT}return StubNested_{accessor}();",
            ]
        elif method.return_kind == ReturnKind.INTERFACE_POINTER:
            lines += [
                f"{INDENT}if ({static} != 0) {{",
                f"{INDENT * 2}return {static};",
                f"{INDENT}}}",
                f"{INDENT}return &StubNested_{accessor}();",
            ]
        else:
            lines.append(f"{INDENT}return {static};")
        lines += ["}", ""]
        return lines

    def render_passthrough(self, stub, passthrough):
        method = passthrough.method
        return_type = method.return_type
        spell = self.speller(passthrough.declaring)
        lines = [f"inline {method_signature(method, stub.name + '::', spell)} {{"]
        if return_type.kind == TypeKind.REFERENCE:
            lines.append(f"{INDENT}return *this;")
        elif not return_type.is_void:
            lines.append(f"{INDENT}return {spell(return_type.strip_const())}();")
        lines += ["}", ""]
        return lines
