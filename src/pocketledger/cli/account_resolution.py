"""CLI helpers for entity resolution and value parsing."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Callable, TypeVar

import click
from pocketledger.cli.error_handling import handle_domain_error
from pocketledger.domain.ledger import Ledger
from pocketledger.utils.amount_parser import evaluate_expression, parse_amount
from pocketledger.utils.date_parser import parse_datetime

T = TypeVar("T")


def get_ledger(ctx: click.Context) -> Ledger:
    return ctx.obj["ledger"]


def resolve_or_exit(
    ctx: click.Context, resolver: Callable[[Ledger, str], T], reference: str
) -> T:
    """Resolve a name or ID with ``resolver``, or exit with a CLI error.

    This keeps error messaging and exit behavior consistent across commands.
    """
    try:
        return resolver(get_ledger(ctx), reference)
    except ValueError as exc:
        handle_domain_error(ctx, exc)


def parse_amount_or_exit(ctx: click.Context, text: str) -> Decimal:
    """Evaluate an amount expression such as "12.50+3", or exit."""
    try:
        return evaluate_expression(text)
    except (ValueError, ArithmeticError) as e:
        click.echo(f"Error: Invalid amount: {e}", err=True)
        ctx.exit(1)


def parse_number_or_exit(ctx: click.Context, text: str) -> Decimal:
    """Parse a plain or formatted number such as "1,250" or "$80", or exit."""
    try:
        return parse_amount(text)
    except ValueError as e:
        click.echo(f"Error: Invalid amount: {e}", err=True)
        ctx.exit(1)


def parse_datetime_or_exit(ctx: click.Context, text: str) -> datetime:
    try:
        return parse_datetime(text)
    except ValueError as e:
        click.echo(f"Error: Invalid date format: {e}", err=True)
        ctx.exit(1)
