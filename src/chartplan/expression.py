"""Boolean requirement expressions over integration names.

A dependency declares the integrations it needs as a small boolean expression,
for instance ``acs && (github || gitlab || bitbucket)``. The grammar is::

    expr   := term (OR term)*
    term   := factor (AND factor)*
    factor := NOT factor | NAME | '(' expr ')'

where ``OR`` is ``||`` or ``or``, ``AND`` is ``&&`` or ``and`` and ``NOT`` is
``!`` or ``not``. Every ``NAME`` must be a registered integration name; it is
bound to a boolean when the expression is evaluated.
"""

import re
from dataclasses import dataclass
from typing import Iterable, Iterator, Mapping, Union

from chartplan.errors import InvalidExpressionError, UnknownIntegrationError

__all__ = [
    "Name",
    "Not",
    "And",
    "Or",
    "Expression",
    "parse_expression",
    "ExpressionEvaluator",
]


@dataclass(frozen=True)
class Name:
    name: str

    def evaluate(self, variables: Mapping[str, bool]) -> bool:
        return bool(variables.get(self.name, False))

    def names(self) -> Iterator[str]:
        yield self.name


@dataclass(frozen=True)
class Not:
    operand: "Expression"

    def evaluate(self, variables: Mapping[str, bool]) -> bool:
        return not self.operand.evaluate(variables)

    def names(self) -> Iterator[str]:
        yield from self.operand.names()


@dataclass(frozen=True)
class And:
    left: "Expression"
    right: "Expression"

    def evaluate(self, variables: Mapping[str, bool]) -> bool:
        return self.left.evaluate(variables) and self.right.evaluate(variables)

    def names(self) -> Iterator[str]:
        yield from self.left.names()
        yield from self.right.names()


@dataclass(frozen=True)
class Or:
    left: "Expression"
    right: "Expression"

    def evaluate(self, variables: Mapping[str, bool]) -> bool:
        return self.left.evaluate(variables) or self.right.evaluate(variables)

    def names(self) -> Iterator[str]:
        yield from self.left.names()
        yield from self.right.names()


Expression = Union[Name, Not, And, Or]

_TOKEN_PATTERN = re.compile(
    r"\s*(?:(?P<op>&&|\|\||!|\(|\))|(?P<name>[A-Za-z_][A-Za-z0-9_-]*))"
)
_KEYWORDS = {"and": "&&", "or": "||", "not": "!"}
_END = ("end", "")


def _tokenize(text: str) -> list[tuple[str, str]]:
    tokens = []
    position = 0
    text = text.rstrip()
    while position < len(text):
        match = _TOKEN_PATTERN.match(text, position)
        if match is None:
            raise InvalidExpressionError(
                f"unexpected character {text[position:].lstrip()[:1]!r} at position {position}",
                expression=text,
            )
        if match.group("op"):
            tokens.append(("op", match.group("op")))
        elif match.group("name").lower() in _KEYWORDS:
            tokens.append(("op", _KEYWORDS[match.group("name").lower()]))
        else:
            tokens.append(("name", match.group("name")))
        position = match.end()
    tokens.append(_END)
    return tokens


class _Parser:
    """Recursive-descent parser over the token list produced by :func:`_tokenize`."""

    def __init__(self, text: str):
        self._text = text
        self._tokens = _tokenize(text)
        self._position = 0

    def parse(self) -> Expression:
        if self._peek() == _END:
            raise InvalidExpressionError("empty expression", expression=self._text)
        expression = self._expr()
        if self._peek() != _END:
            self._fail(f"unexpected {self._peek()[1]!r}")
        return expression

    def _peek(self) -> tuple[str, str]:
        return self._tokens[self._position]

    def _advance(self) -> tuple[str, str]:
        token = self._tokens[self._position]
        self._position += 1
        return token

    def _accept(self, operator: str) -> bool:
        if self._peek() == ("op", operator):
            self._position += 1
            return True
        return False

    def _fail(self, message: str):
        raise InvalidExpressionError(message, expression=self._text)

    def _expr(self) -> Expression:
        expression = self._term()
        while self._accept("||"):
            expression = Or(expression, self._term())
        return expression

    def _term(self) -> Expression:
        expression = self._factor()
        while self._accept("&&"):
            expression = And(expression, self._factor())
        return expression

    def _factor(self) -> Expression:
        if self._accept("!"):
            return Not(self._factor())
        if self._accept("("):
            expression = self._expr()
            if not self._accept(")"):
                self._fail("missing closing parenthesis")
            return expression
        kind, value = self._advance()
        if kind == "name":
            return Name(value)
        if kind == "end":
            self._fail("unexpected end of expression")
        self._fail(f"unexpected {value!r}")


def parse_expression(text: str) -> Expression:
    """Parse expression text into its syntax tree.

    Example:
        >>> parse_expression("acs && !quay")
        And(left=Name(name='acs'), right=Not(operand=Name(name='quay')))

    Raises:
        InvalidExpressionError: If the text is empty or malformed.
    """
    return _Parser(text).parse()


class ExpressionEvaluator:
    """Evaluate requirement expressions against the registered integration names.

    Compiled expressions are cached by text; evaluation has no side effects.

    Example:
        >>> evaluator = ExpressionEvaluator(["acs", "github", "gitlab"])
        >>> evaluator.evaluate("acs && (github || gitlab)", {"acs": True, "gitlab": True})
        True
    """

    def __init__(self, names: Iterable[str]):
        self._names = frozenset(names)
        self._compiled: dict[str, Expression] = {}

    @property
    def names(self) -> frozenset[str]:
        return self._names

    def compile(self, text: str) -> Expression:
        """Parse and check an expression, caching the result.

        Raises:
            InvalidExpressionError: If the text can't be parsed.
            UnknownIntegrationError: If the expression references an unregistered name.
        """
        expression = self._compiled.get(text)
        if expression is not None:
            return expression

        expression = parse_expression(text)
        unknown = [name for name in expression.names() if name not in self._names]
        if unknown:
            raise UnknownIntegrationError(
                "unknown integration",
                integration=", ".join(dict.fromkeys(unknown)),
                expression=text,
            )
        self._compiled[text] = expression
        return expression

    def evaluate(self, text: str, variables: Mapping[str, bool]) -> bool:
        return self.compile(text).evaluate(variables)

    def names_in(self, text: str) -> list[str]:
        """Return the integration names referenced by the expression, in order of appearance."""
        return list(dict.fromkeys(self.compile(text).names()))
