"""
Declaration records handed over by the C++ front-end.

Everything here is an immutable value: a Declaration names its bases and
field types by string only, and the symbol table resolves those names once
all translation units have been merged.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass, field, replace

from ..errors import MalformedDeclaration
from ..utils.cpp_nodes import mangle_token, operator_identifier


class TypeKind(enum.Enum):
    PRIMITIVE = "primitive"
    POINTER = "pointer"
    REFERENCE = "reference"
    NAMED = "named"


class DeclKind(enum.Enum):
    CLASS = "class"
    INTERFACE = "interface"


class Visibility(enum.Enum):
    PUBLIC = "public"
    PROTECTED = "protected"
    PRIVATE = "private"


class SpecialMember(enum.Enum):
    CONSTRUCTOR = "constructor"
    COPY_CONSTRUCTOR = "copy_constructor"
    DESTRUCTOR = "destructor"
    ASSIGNMENT = "assignment"


@dataclass(frozen=True)
class SemanticType:
    kind: TypeKind
    name: str | None = None
    inner: SemanticType | None = None
    is_const: bool = False

    @classmethod
    def primitive(cls, name, is_const=False):
        return cls(TypeKind.PRIMITIVE, name=name, is_const=is_const)

    @classmethod
    def named(cls, name, is_const=False):
        return cls(TypeKind.NAMED, name=name, is_const=is_const)

    @classmethod
    def pointer(cls, inner, is_const=False):
        return cls(TypeKind.POINTER, inner=inner, is_const=is_const)

    @classmethod
    def reference(cls, inner):
        return cls(TypeKind.REFERENCE, inner=inner)

    @property
    def is_void(self):
        return self.kind == TypeKind.PRIMITIVE and self.name == "void"

    @property
    def is_indirect(self):
        return self.kind in (TypeKind.POINTER, TypeKind.REFERENCE)

    def target_name(self):
        """Declaration name behind any pointer/reference layers, None for primitives"""
        current = self
        while current.inner is not None:
            current = current.inner
        if current.kind == TypeKind.NAMED:
            return current.name
        return None

    def strip_const(self):
        """Drop the outermost const so the type can be assigned to"""
        if not self.is_const:
            return self
        return replace(self, is_const=False)

    def with_names(self, rename):
        """Copy with the Named layer renamed through ``rename``"""
        if self.inner is not None:
            return replace(self, inner=self.inner.with_names(rename))
        if self.kind == TypeKind.NAMED:
            return replace(self, name=rename(self.name))
        return self

    def spelling(self):
        if self.kind == TypeKind.POINTER:
            text = self.inner.spelling() + "*"
            return text + " const" if self.is_const else text
        if self.kind == TypeKind.REFERENCE:
            return self.inner.spelling() + "&"
        return ("const " if self.is_const else "") + self.name

    def __str__(self):
        return self.spelling()


@dataclass(frozen=True)
class Parameter:
    type: SemanticType
    name: str | None = None


@dataclass(frozen=True)
class Method:
    name: str
    parameters: tuple[Parameter, ...] = ()
    return_type: SemanticType | None = None
    is_pure_virtual: bool = False
    is_const: bool = False
    visibility: Visibility = Visibility.PUBLIC

    def signature(self):
        """Overload key: name plus parameter spellings plus constness"""
        return (self.name, tuple(p.type.spelling() for p in self.parameters), self.is_const)

    def identifier(self):
        return operator_identifier(self.name)

    def mangled_name(self):
        """Identifier that stays unique across overloads: ifs2_func1(int, char) -> ifs2_func1_int_char"""
        parts = [self.identifier()] + [mangle_token(p.type.spelling()) for p in self.parameters]
        if self.is_const:
            parts.append("const")
        return "_".join(parts)


@dataclass(frozen=True)
class Field:
    name: str
    type: SemanticType
    owner: str


@dataclass(frozen=True)
class Declaration:
    name: str
    kind: DeclKind = DeclKind.CLASS
    bases: tuple[str, ...] = ()
    methods: tuple[Method, ...] = ()
    fields: tuple[Field, ...] = ()
    is_fully_defined: bool = True
    unit: str | None = field(default=None, compare=False)

    @property
    def short_name(self):
        return self.name.rsplit("::", 1)[-1]

    @property
    def is_interface(self):
        return self.kind == DeclKind.INTERFACE


@dataclass(frozen=True)
class CallSite:
    callee: str
    constructs: tuple[str, ...] = ()
    arguments: tuple[CallSite, ...] = ()


@dataclass(frozen=True)
class FunctionBody:
    name: str
    kind: str = "function"
    calls: tuple[CallSite, ...] = ()
    unit: str | None = field(default=None, compare=False)


@dataclass(frozen=True)
class TranslationUnit:
    name: str
    declarations: tuple[Declaration, ...] = ()
    bodies: tuple[FunctionBody, ...] = ()
    header: str | None = None


def special_member_kind(declaration, method):
    """
    Recognize constructors, copy-constructors, destructors and operator=.
    Returns a SpecialMember or None for an ordinary method.
    """
    short = declaration.short_name
    if method.name == "operator=":
        return SpecialMember.ASSIGNMENT
    if method.name.startswith("~"):
        return SpecialMember.DESTRUCTOR
    if method.name == short and method.return_type is None:
        if len(method.parameters) == 1:
            param = method.parameters[0].type
            if param.kind == TypeKind.REFERENCE and param.target_name() in (short, declaration.name):
                return SpecialMember.COPY_CONSTRUCTOR
        return SpecialMember.CONSTRUCTOR
    return None


def validate_declaration(declaration):
    """Raise MalformedDeclaration for records the front-end should never produce"""
    if not declaration.is_fully_defined and (declaration.methods or declaration.fields):
        raise MalformedDeclaration(declaration, "forward declaration carries members")

    for member in declaration.fields:
        if member.owner != declaration.name:
            raise MalformedDeclaration(
                declaration, f"field '{member.name}' is owned by '{member.owner}'"
            )

    for method in declaration.methods:
        special = special_member_kind(declaration, method)
        if method.return_type is None and special not in (
            SpecialMember.CONSTRUCTOR,
            SpecialMember.COPY_CONSTRUCTOR,
            SpecialMember.DESTRUCTOR,
        ):
            raise MalformedDeclaration(declaration, f"method '{method.name}' has no return type")
        if special is not None:
            continue
        if declaration.is_interface and not method.is_pure_virtual:
            raise MalformedDeclaration(
                declaration, f"interface method '{method.name}' is not pure virtual"
            )
        if not declaration.is_interface and method.is_pure_virtual:
            raise MalformedDeclaration(
                declaration, f"pure virtual method '{method.name}' outside an interface"
            )
    return declaration
