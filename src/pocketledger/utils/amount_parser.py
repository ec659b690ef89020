"""Amount parsing utilities."""

from decimal import Decimal, InvalidOperation
import re

_TOKEN = re.compile(r"\s*(?:(\d+(?:\.\d*)?|\.\d+)|(.))")


def parse_amount(amount_str: str) -> Decimal:
    """Parse an amount string into a Decimal.

    Handles various formats:
    - "123.45"
    - "$123.45"
    - "-123.45"
    - "1,234.56"
    - "(123.45)" (negative in parentheses)

    Args:
        amount_str: Amount string

    Returns:
        Decimal amount

    Raises:
        ValueError: If amount string cannot be parsed
    """
    if not amount_str or not amount_str.strip():
        raise ValueError("Empty amount string")

    amount_str = amount_str.strip()

    # Handle parentheses notation (negative)
    is_negative = False
    if amount_str.startswith("(") and amount_str.endswith(")"):
        is_negative = True
        amount_str = amount_str[1:-1]

    # Remove currency symbols and thousands separators
    amount_str = re.sub(r"[$€£¥₹₩]", "", amount_str)
    amount_str = amount_str.replace(",", "").strip()

    try:
        amount = Decimal(amount_str)
    except InvalidOperation as e:
        raise ValueError(f"Could not parse amount '{amount_str}'") from e
    if not amount.is_finite():
        raise ValueError(f"Could not parse amount '{amount_str}'")
    return -amount if is_negative else amount


def _tokenize(text: str) -> list[str]:
    tokens = []
    position = 0
    text = text.rstrip()
    while position < len(text):
        match = _TOKEN.match(text, position)
        number, symbol = match.groups()
        if number is not None:
            tokens.append(number)
        elif symbol in "+-*/()":
            tokens.append(symbol)
        else:
            raise ValueError(f"Unexpected character '{symbol}' in expression")
        position = match.end()
    return tokens


class _ExpressionParser:
    """Recursive-descent parser over a token list.

    Grammar::

        expression := term (("+" | "-") term)*
        term       := factor (("*" | "/") factor)*
        factor     := "-" factor | "+" factor | NUMBER | "(" expression ")"
    """

    def __init__(self, tokens: list[str]):
        self.tokens = tokens
        self.position = 0

    def _peek(self) -> str | None:
        return self.tokens[self.position] if self.position < len(self.tokens) else None

    def _take(self) -> str:
        token = self.tokens[self.position]
        self.position += 1
        return token

    def parse(self) -> Decimal:
        value = self._expression()
        if self._peek() is not None:
            raise ValueError(f"Unexpected '{self._peek()}' in expression")
        return value

    def _expression(self) -> Decimal:
        value = self._term()
        while self._peek() in ("+", "-"):
            operator = self._take()
            right = self._term()
            value = value + right if operator == "+" else value - right
        return value

    def _term(self) -> Decimal:
        value = self._factor()
        while self._peek() in ("*", "/"):
            operator = self._take()
            right = self._factor()
            if operator == "*":
                value = value * right
            elif right == 0:
                raise ValueError("Division by zero")
            else:
                value = value / right
        return value

    def _factor(self) -> Decimal:
        token = self._peek()
        if token is None:
            raise ValueError("Incomplete expression")
        if token == "-":
            self._take()
            return -self._factor()
        if token == "+":
            self._take()
            return self._factor()
        if token == "(":
            self._take()
            value = self._expression()
            if self._peek() != ")":
                raise ValueError("Missing closing parenthesis")
            self._take()
            return value
        if token in "*/)":
            raise ValueError(f"Unexpected '{token}' in expression")
        return Decimal(self._take())


def evaluate_expression(expression: str) -> Decimal:
    """Evaluate a keypad arithmetic expression such as ``"12.50+7*2"``.

    Supports digits, ``.``, ``+ - * /``, unary minus and parentheses, with
    ``*`` and ``/`` binding tighter than ``+`` and ``-``. A comma is read as a
    decimal point. A trailing operator is ignored, so ``"50+"`` is 50, and an
    empty expression is 0.

    Args:
        expression: Expression text

    Returns:
        Decimal result

    Raises:
        ValueError: On division by zero or text that is not an expression
    """
    tokens = _tokenize((expression or "").replace(",", "."))
    while tokens and tokens[-1] in "+-*/":
        tokens.pop()
    if not tokens:
        return Decimal(0)
    return _ExpressionParser(tokens).parse()
