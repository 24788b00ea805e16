#!/usr/bin/env python3
"""
Line Calculator Expression Engine
Tokenizer and stack evaluator for single-line arithmetic expressions
"""

import logging
import re
import string
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Union

import numpy as np

logger = logging.getLogger(__name__)

# ==========================================
# ERRORS
# ==========================================

class MalformedExpressionError(ValueError):
    """Raised when a token sequence cannot be reduced to a single value"""

# ==========================================
# TOKEN MODEL
# ==========================================

class TokenType(Enum):
    NUMBER = "NUMBER"
    OPERATOR = "OPERATOR"
    FUNCTION = "FUNCTION"

OPERATORS = frozenset('+-*/')

FUNCTION_NAMES = frozenset({
    'log', 'sin', 'abs', 'acos', 'asin', 'ceil', 'cos',
    'deg', 'exp', 'floor', 'modf', 'rad', 'sqrt', 'tan',
})

# Recognized by the tokenizer, no transformation defined
UNIMPLEMENTED_FUNCTIONS = frozenset({'deg', 'rad'})

@dataclass(frozen=True)
class Token:
    type: TokenType
    value: Union[str, float]
    position: int = field(default=0, compare=False)

    def __post_init__(self):
        """Reject values that do not belong to the token type"""
        if self.type == TokenType.NUMBER:
            if isinstance(self.value, bool) or not isinstance(self.value, (int, float)):
                raise ValueError(f"Number token needs a numeric value, got {self.value!r}")
            object.__setattr__(self, 'value', float(self.value))
        elif self.type == TokenType.OPERATOR:
            if self.value not in OPERATORS:
                raise ValueError(f"Unknown operator: {self.value!r}")
        elif self.type == TokenType.FUNCTION:
            if self.value not in FUNCTION_NAMES:
                raise ValueError(f"Unknown function: {self.value!r}")
        else:
            raise ValueError(f"Unknown token type: {self.type!r}")

# ==========================================
# TOKENIZER
# ==========================================

_NUMBER_PATTERN = re.compile(r'(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?')
_WORD_PATTERN = re.compile(r'[A-Za-z]+')

def tokenize(expression: str) -> List[Token]:
    """Convert an expression line into tokens, dropping anything unrecognized"""
    tokens = []
    i = 0

    while i < len(expression):
        char = expression[i]

        if char.isspace():
            i += 1

        # Numbers (decimal point and exponent allowed)
        elif char.isdigit() or char == '.':
            match = _NUMBER_PATTERN.match(expression, i)
            if match:
                tokens.append(Token(TokenType.NUMBER, float(match.group()), i))
                i = match.end()
            else:
                logger.debug(f"Skipping stray '.' at position {i}")
                i += 1

        elif char in OPERATORS:
            tokens.append(Token(TokenType.OPERATOR, char, i))
            i += 1

        elif char in string.ascii_letters:
            word = _WORD_PATTERN.match(expression, i).group()
            if word in FUNCTION_NAMES:
                tokens.append(Token(TokenType.FUNCTION, word, i))
            else:
                logger.debug(f"Dropping unrecognized word '{word}' at position {i}")
            i += len(word)

        else:
            logger.debug(f"Skipping unexpected character {char!r} at position {i}")
            i += 1

    return tokens

# ==========================================
# OPERATOR AND FUNCTION DISPATCH
# ==========================================

_BINARY_OPS: Dict[str, Callable] = {
    '+': np.add,
    '-': np.subtract,
    '*': np.multiply,
    '/': np.divide,
}

def _fractional_part(value):
    fraction, _ = np.modf(value)
    return fraction

_UNARY_FUNCS: Dict[str, Callable] = {
    'log': np.log,
    'sin': np.sin,
    'abs': np.abs,
    'acos': np.arccos,
    'asin': np.arcsin,
    'ceil': np.ceil,
    'cos': np.cos,
    'exp': np.exp,
    'floor': np.floor,
    'modf': _fractional_part,
    'sqrt': np.sqrt,
    'tan': np.tan,
}

def apply_operator(op: str, b: float, a: float) -> float:
    """Apply op to a (pushed first) and b (pushed last): a op b"""
    # IEEE results (inf, nan) instead of warnings
    with np.errstate(all='ignore'):
        return float(_BINARY_OPS[op](np.float64(a), np.float64(b)))

def apply_function(name: str, a: float) -> float:
    if name in UNIMPLEMENTED_FUNCTIONS:
        logger.warning(f"Function '{name}' has no defined behavior, returning 0")
        return 0.0

    with np.errstate(all='ignore'):
        return float(_UNARY_FUNCS[name](np.float64(a)))

# ==========================================
# EVALUATOR
# ==========================================

def _pop_operand(values: List[float], context: str) -> float:
    if not values:
        raise MalformedExpressionError(f"Missing operand for {context}")
    return values.pop()

def _reduce_operator(values: List[float], ops: List[str]):
    op = ops.pop()
    b = _pop_operand(values, f"operator '{op}'")
    a = _pop_operand(values, f"operator '{op}'")
    values.append(apply_operator(op, b, a))

def evaluate(tokens: List[Token], strict: bool = False) -> float:
    """
    Reduce a token sequence to a single value.

    Operators are reduced while scanning whenever the incoming operator is
    '+' or '-', or the pending operator on top is '*' or '/'. Functions are
    collected and applied only after all operators are drained, last
    encountered first, each to the current top of the operand stack.
    """
    values: List[float] = []
    ops: List[str] = []
    funcs: List[Token] = []

    for token in tokens:
        if token.type == TokenType.NUMBER:
            values.append(token.value)

        elif token.type == TokenType.OPERATOR:
            while ops and (token.value in '+-' or ops[-1] in '*/'):
                _reduce_operator(values, ops)
            ops.append(token.value)

        elif token.type == TokenType.FUNCTION:
            funcs.append(token)

    while ops:
        _reduce_operator(values, ops)

    while funcs:
        func = funcs.pop()
        operand = _pop_operand(values, f"function '{func.value}'")
        values.append(apply_function(func.value, operand))

    if not values:
        raise MalformedExpressionError("Expression produced no value")

    if len(values) > 1:
        if strict:
            raise MalformedExpressionError(
                f"Expression left {len(values)} values on the stack, expected 1"
            )
        logger.debug(f"Ignoring {len(values) - 1} leftover operand(s)")

    return values[-1]

def calculate(expression: str, strict: bool = False) -> float:
    """Tokenize and evaluate one expression line"""
    return evaluate(tokenize(expression), strict=strict)

def format_result(value: float) -> str:
    return str(value)
