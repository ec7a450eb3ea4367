import json

import pytest

from declviews.codeviews.classifier import TypeClassifier
from declviews.codeviews.stub import StubGenerator
from declviews.model import SymbolTable, unit_from_dict


def method(name, ret="void", params=(), pure=True, const=False, visibility="public"):
    return {
        "name": name,
        "return": ret,
        "params": list(params),
        "pure_virtual": pure,
        "const": const,
        "visibility": visibility,
    }


IFS_UNIT = {
    "unit": "ifs1.hpp",
    "header": "ifs1.hpp",
    "declarations": [
        {
            "name": "Ifs3",
            "kind": "interface",
            "methods": [
                {"name": "~Ifs3", "return": None, "pure_virtual": False},
                method("dostuff"),
            ],
        },
        {
            "name": "Ifs2",
            "kind": "interface",
            "methods": [
                {"name": "~Ifs2", "return": None, "pure_virtual": False},
                method("ifs2_func1", "int", [{"type": "int", "name": "v"}, {"type": "char", "name": "c"}]),
            ],
        },
        {
            "name": "Ifs1",
            "kind": "interface",
            "bases": ["Ifs2"],
            "methods": [
                {"name": "~Ifs1", "return": None, "pure_virtual": False},
                method("run"),
                method("get_ifc2", "Ifs2&"),
                method("get_ifc3", "Ifs3&"),
            ],
        },
    ],
}

CLASS_MEMBERS_UNIT = {
    "unit": "class_members.hpp",
    "header": "class_members.hpp",
    "declarations": [
        {"name": "Forward_ptr", "fully_defined": False},
        {"name": "Forward_ref", "fully_defined": False},
        {"name": "Forward_decl", "fully_defined": False},
        {
            "name": "ToForward",
            "fields": [
                {"name": "fwd_ptr", "type": "Forward_ptr*"},
                {"name": "fwd_ref", "type": "Forward_ref&"},
                {"name": "fwd_decl", "type": "Forward_decl*"},
            ],
        },
        {"name": "Forward_decl"},
        {
            "name": "ToImpl",
            "fields": [
                {"name": "impl", "type": "Impl"},
                {"name": "impl_ptr", "type": "Impl_ptr*"},
                {"name": "impl_ref", "type": "Impl_ref&"},
            ],
        },
        {"name": "Impl"},
        {"name": "Impl_ptr"},
        {"name": "Impl_ref"},
        {"name": "ToPrimitive", "fields": [{"name": "x", "type": "int"}]},
    ],
}

BODY_UNIT = {
    "unit": "functions_body_call.hpp",
    "bodies": [
        {"name": "empty"},
        {"name": "arg0"},
        {"name": "arg1"},
        {"name": "single_call", "calls": ["empty"]},
        {
            "name": "if_",
            "calls": [
                {"callee": "arg0", "constructs": ["if"]},
                {"callee": "empty", "constructs": ["if"]},
                {"callee": "empty", "constructs": ["else"]},
            ],
        },
        {
            "name": "for_",
            "calls": [
                {"callee": "arg0", "constructs": ["for"]},
                {"callee": "empty", "constructs": ["for"]},
            ],
        },
        {
            "name": "nested",
            "calls": [{"callee": "arg0", "arguments": [{"callee": "arg1"}]}],
        },
    ],
}

METHOD_BODY_UNIT = {
    "unit": "class_method_body.hpp",
    "declarations": [
        {"name": "Dummy", "methods": [method("fun", pure=False)]},
        {
            "name": "CallOtherClass",
            "methods": [method("func", pure=False)],
            "fields": [{"name": "a", "type": "Dummy"}],
        },
    ],
    "bodies": [
        {"name": "InlineMethods::InlineMethods", "calls": ["ctor"]},
        {"name": "InlineMethods::~InlineMethods", "calls": ["dtor"]},
        {"name": "InlineMethods::func", "calls": ["method"]},
        {"name": "Dummy::fun"},
        {"name": "CallOtherClass::func", "calls": ["Dummy::fun"]},
    ],
}


@pytest.fixture
def method_record():
    return method


@pytest.fixture
def ifs_unit():
    return unit_from_dict(IFS_UNIT)


@pytest.fixture
def ifs_symbols(ifs_unit):
    return SymbolTable.merge([ifs_unit])


@pytest.fixture
def ifs_classification(ifs_symbols):
    return TypeClassifier(ifs_symbols).classify()


@pytest.fixture
def generator(ifs_symbols, ifs_classification):
    return StubGenerator(ifs_symbols, ifs_classification)


@pytest.fixture
def class_members_unit():
    return unit_from_dict(CLASS_MEMBERS_UNIT)


@pytest.fixture
def class_members_symbols(class_members_unit):
    return SymbolTable.merge([class_members_unit])


@pytest.fixture
def body_unit():
    return unit_from_dict(BODY_UNIT)


@pytest.fixture
def method_body_unit():
    return unit_from_dict(METHOD_BODY_UNIT)


@pytest.fixture
def unit_files(tmp_path):
    """The reference units written as front-end JSON documents"""
    paths = []
    for payload in (IFS_UNIT, CLASS_MEMBERS_UNIT, BODY_UNIT):
        path = tmp_path / (payload["unit"].replace(".hpp", ".json"))
        path.write_text(json.dumps(payload), encoding="utf-8")
        paths.append(path)
    return paths
