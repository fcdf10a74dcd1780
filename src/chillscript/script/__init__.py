"""
chill-script expression language.

Tokenizer, named-rule parser and tree-walking evaluator.

Usage:
    from chillscript.script import ChillScriptRuntime, evaluate, parse

    expr = parse("- - price")
    result = evaluate(expr, ChillScriptRuntime({"price": 10}))
    # result == Decimal("10")
"""

from chillscript.script.evaluator import evaluate, evaluate_source
from chillscript.script.grammar import Grammar, default_grammar
from chillscript.script.parser import ChillScriptParser, parse
from chillscript.script.runtime import ChillScriptRuntime, NamespaceImportError
from chillscript.script.tokenizer import Token, TokenStream, TokenType, tokenize

__all__ = [
    "ChillScriptParser",
    "ChillScriptRuntime",
    "Grammar",
    "NamespaceImportError",
    "Token",
    "TokenStream",
    "TokenType",
    "default_grammar",
    "evaluate",
    "evaluate_source",
    "parse",
    "tokenize",
]
