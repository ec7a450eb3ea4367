import re

type_words = {
    "primitive_type": [
        "void",
        "bool",
        "char",
        "wchar_t",
        "char8_t",
        "char16_t",
        "char32_t",
        "short",
        "int",
        "long",
        "float",
        "double",
        "signed",
        "unsigned",
        "size_t",
        "ptrdiff_t",
        "intptr_t",
        "uintptr_t",
        "int8_t",
        "int16_t",
        "int32_t",
        "int64_t",
        "uint8_t",
        "uint16_t",
        "uint32_t",
        "uint64_t",
    ],
    "type_qualifier": [
        "const",
        "volatile",
    ],
    "elaborated_keyword": [
        "class",
        "struct",
        "union",
        "enum",
        "typename",
    ],
}

control_constructs = [
    "if",
    "else",
    "for",
    "for_range",
    "while",
    "do",
    "switch",
    "case",
    "try",
    "catch",
    "lambda",
]

visibility_types = [
    "public",
    "protected",
    "private",
]

token_types = {
    "*": "_ptr",
    "&": "_ref",
    "::": "_",
    " ": "_",
    ",": "_",
    "<": "_",
    ">": "_",
}

operator_names = {
    "==": "eq",
    "!=": "ne",
    "<=": "le",
    ">=": "ge",
    "<": "lt",
    ">": "gt",
    "()": "call",
    "[]": "index",
    "<<": "shl",
    ">>": "shr",
    "+": "plus",
    "-": "minus",
    "*": "mul",
    "/": "div",
    "%": "mod",
    "!": "not",
    "&&": "and",
    "||": "or",
    "&": "bitand",
    "|": "bitor",
    "^": "xor",
    "~": "compl",
    "++": "inc",
    "--": "dec",
    "->": "arrow",
    "+=": "plus_assign",
    "-=": "minus_assign",
    "*=": "mul_assign",
    "/=": "div_assign",
    "=": "assign",
}

_IDENTIFIER_RE = re.compile(r"[^0-9A-Za-z_]")


def is_primitive_spelling(words):
    """True when every word of a base type spelling is a builtin type word"""
    if not words:
        return False
    return all(word in type_words["primitive_type"] for word in words)


def primitive_default(name):
    """Zero value a default-constructed primitive holds"""
    words = name.split()
    if not words or "void" in words:
        return None
    if "bool" in words:
        return False
    if "float" in words or "double" in words:
        return 0.0
    if words[-1].startswith("char") or "wchar_t" in words:
        return "\0"
    return 0


def mangle_token(spelling):
    """
    Turn a C++ type spelling into an identifier fragment.
    Example: 'const MadeUp&' -> 'const_MadeUp_ref'
    """
    text = spelling
    for token, replacement in token_types.items():
        text = text.replace(token, replacement)
    text = _IDENTIFIER_RE.sub("_", text)
    text = re.sub(r"_+", "_", text).strip("_")
    return text


def operator_identifier(name):
    """Method name usable as an identifier: 'operator==' -> 'operator_eq'"""
    if name.isidentifier():
        return name
    if name.startswith("operator"):
        symbol = name[len("operator"):].strip()
        if symbol in operator_names:
            return "operator_" + operator_names[symbol]
    return mangle_token(name)


def sanitize_identifier(name):
    """Qualified C++ name to a flat identifier: 'ns::Ifs1' -> 'ns_Ifs1'"""
    return mangle_token(name.replace("::", "_"))
