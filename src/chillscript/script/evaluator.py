"""
Tree-walking evaluator for chill-script.

Each node evaluates its children first and then applies its own operation
(see ``Expression.evaluate``). This module is the entry point hosts call:
it supplies a default runtime, logs failures and, when the source text is
known, attaches a caret snippet for the failing node. It does NOT use
Python's eval(); only the closed set of AST node types run.
"""

from __future__ import annotations

import logging
from typing import Any

from chillscript.core.errors import ErrorContext, EvaluationError, SourcePosition

from .expressions import Expression
from .parser import parse
from .runtime import ChillScriptRuntime

logger = logging.getLogger(__name__)


def evaluate(expression: Expression, runtime: ChillScriptRuntime | None = None) -> Any:
    """Evaluate a parsed expression against a runtime.

    Args:
        expression: Parsed expression tree.
        runtime: Bindings and imports to resolve identifiers against. A fresh
            empty runtime is used if omitted.

    Returns:
        The computed value (numbers are ``decimal.Decimal``).

    Raises:
        EvaluationError: If any node cannot handle the values it receives.
    """
    runtime = runtime if runtime is not None else ChillScriptRuntime()
    logger.debug("Evaluating %s", expression.debug_label)
    try:
        return expression.evaluate(runtime)
    except EvaluationError as e:
        failed = e.expression.debug_label if e.expression is not None else "?"
        logger.debug("Evaluation of %s failed at %s: %s", expression.debug_label, failed, e.message)
        raise


def evaluate_source(
    source: str,
    runtime: ChillScriptRuntime | None = None,
    rule_name: str = "expression",
) -> Any:
    """Parse and evaluate ``source`` in one call.

    Evaluation errors get an ErrorContext pointing at the failing node.
    """
    runtime = runtime if runtime is not None else ChillScriptRuntime()
    expression = parse(source, rule_name, settings=runtime.settings)
    try:
        return evaluate(expression, runtime)
    except EvaluationError as e:
        span = e.expression.span if e.expression is not None else None
        if e.context is None and span is not None:
            e.with_context(
                ErrorContext.from_source(
                    source,
                    SourcePosition.of(source, span.start),
                    runtime.settings.source_name,
                    width=span.end - span.start,
                )
            )
        raise
