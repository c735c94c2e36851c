"""
Arithmetic Expression Calculator

Evaluates a deliberately narrow arithmetic language with a small
recursive-descent parser:

    expression := term (("+" | "-") term)*
    term       := unary (("*" | "/") unary)*
    unary      := ("+" | "-") unary | primary
    primary    := NUMBER | "(" expression ")" | "sqrt" "(" expression ")"

Input is first reduced to a character whitelist (digits, ``+-*/.()``,
whitespace and the letters of ``sqrt``). Nothing is ever handed to a
general-purpose evaluator.
"""

import logging
import math
import re
from dataclasses import dataclass

from .registry import ToolDefinition

logger = logging.getLogger(__name__)

DISALLOWED_CHARS = re.compile(r"[^0-9+\-*/.()sqrt\s]")
TOKEN_PATTERN = re.compile(r"\s*(?:(\d+\.?\d*|\.\d+)|([a-z]+)|(.))")
MAX_NESTING = 100


class CalculationError(ValueError):
    """The expression could not be parsed or evaluated."""


@dataclass(frozen=True)
class Token:
    kind: str  # "number", "name", "op" or "end"
    text: str
    position: int


def sanitize_expression(expression: str) -> str:
    """Strip every character outside the calculator's whitelist."""
    return DISALLOWED_CHARS.sub("", expression)


def tokenize(expression: str) -> list[Token]:
    """Split a sanitized expression into tokens."""
    tokens: list[Token] = []
    position = 0
    length = len(expression)
    while position < length:
        match = TOKEN_PATTERN.match(expression, position)
        if match is None or match.end() == position:
            break
        number, name, op = match.groups()
        if number is not None:
            tokens.append(Token("number", number, match.start(1)))
        elif name is not None:
            tokens.append(Token("name", name, match.start(2)))
        elif op is not None:
            if op not in "+-*/()":
                raise CalculationError(f"Unexpected character '{op}'")
            tokens.append(Token("op", op, match.start(3)))
        position = match.end()
    tokens.append(Token("end", "", length))
    return tokens


class _Parser:
    """Recursive-descent evaluator over a token list."""

    def __init__(self, tokens: list[Token]):
        self._tokens = tokens
        self._index = 0
        self._depth = 0

    @property
    def _current(self) -> Token:
        return self._tokens[self._index]

    def _advance(self) -> Token:
        token = self._tokens[self._index]
        self._index += 1
        return token

    def _expect(self, text: str) -> None:
        token = self._current
        if token.kind != "op" or token.text != text:
            found = token.text or "end of expression"
            raise CalculationError(f"Expected '{text}' but found '{found}'")
        self._advance()

    def parse(self) -> float:
        if self._current.kind == "end":
            raise CalculationError("Expression is empty after removing unsupported characters")
        value = self._expression()
        if self._current.kind != "end":
            raise CalculationError(f"Unexpected token '{self._current.text}'")
        return value

    def _expression(self) -> float:
        value = self._term()
        while self._current.kind == "op" and self._current.text in "+-":
            op = self._advance().text
            right = self._term()
            value = value + right if op == "+" else value - right
        return value

    def _term(self) -> float:
        value = self._unary()
        while self._current.kind == "op" and self._current.text in "*/":
            op = self._advance().text
            right = self._unary()
            value = value * right if op == "*" else _divide(value, right)
        return value

    def _unary(self) -> float:
        token = self._current
        if token.kind == "op" and token.text in "+-":
            self._advance()
            self._enter()
            try:
                operand = self._unary()
            finally:
                self._depth -= 1
            return -operand if token.text == "-" else operand
        return self._primary()

    def _primary(self) -> float:
        token = self._current
        if token.kind == "number":
            self._advance()
            return float(token.text)
        if token.kind == "name":
            if token.text != "sqrt":
                raise CalculationError(f"Unknown identifier '{token.text}'")
            self._advance()
            return _sqrt(self._parenthesized())
        if token.kind == "op" and token.text == "(":
            return self._parenthesized()
        found = token.text or "end of expression"
        raise CalculationError(f"Unexpected token '{found}'")

    def _parenthesized(self) -> float:
        self._expect("(")
        self._enter()
        try:
            value = self._expression()
        finally:
            self._depth -= 1
        self._expect(")")
        return value

    def _enter(self) -> None:
        self._depth += 1
        if self._depth > MAX_NESTING:
            raise CalculationError("Expression is nested too deeply")


def _divide(left: float, right: float) -> float:
    # Mirror IEEE semantics; the finiteness check rejects the result later
    if right == 0:
        if left == 0 or math.isnan(left):
            return math.nan
        return math.copysign(math.inf, left) * math.copysign(1.0, right)
    return left / right


def _sqrt(value: float) -> float:
    if value < 0 or math.isnan(value):
        return math.nan
    return math.sqrt(value)


def evaluate(expression: str) -> float:
    """Parse and evaluate an already-sanitized expression."""
    return _Parser(tokenize(expression)).parse()


def format_number(value) -> str:
    """Group thousands and keep at most three decimals: 1234.5678 -> '1,234.568'."""
    if isinstance(value, int):
        return f"{value:,}"
    formatted = f"{value:,.3f}".rstrip("0").rstrip(".")
    return "0" if formatted in ("-0", "") else formatted


def calculate(expression: str) -> dict:
    """
    Safely evaluate an arithmetic expression.

    Supports numeric literals, + - * /, unary signs, parentheses and
    sqrt(...). Characters outside the whitelist are stripped first.

    Args:
        expression: Arithmetic expression as a string

    Returns:
        Dictionary with expression, result and formatted result, or an
        ``error`` entry
    """
    if not isinstance(expression, str) or not expression.strip():
        return {
            "error": 'Expression is empty. Please provide a math expression in format: {"expression": "2 + 2"}',
        }

    sanitized = sanitize_expression(expression)
    if sanitized != expression:
        logger.debug("Sanitized expression '%s' -> '%s'", expression, sanitized)

    try:
        value = evaluate(sanitized)
    except CalculationError as e:
        logger.debug("Calculation error for '%s': %s", expression, e)
        return {"error": f"Calculation failed: {e}"}

    if not math.isfinite(value):
        return {"error": "Invalid calculation result"}

    result = int(value) if value.is_integer() and abs(value) < 2**53 else value

    return {
        "expression": expression,
        "result": result,
        "formatted": format_number(result),
    }


def _handle_calculate(params: dict) -> dict:
    """Handle calculate tool invocation."""
    return calculate(params.get("expression", ""))


TOOL = ToolDefinition(
    name="calculate",
    description=(
        "Perform mathematical calculations. Supports basic arithmetic "
        "(+, -, *, /), parentheses and sqrt()."
    ),
    parameters={
        "type": "object",
        "properties": {
            "expression": {
                "type": "string",
                "description": 'Mathematical expression to evaluate, e.g. "2 + 2", "sqrt(16)", "(3 + 4) * 2"',
            },
        },
        "required": ["expression"],
    },
    handler=_handle_calculate,
)
