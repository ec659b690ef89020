"""Personal finance ledger: accounts, goals, debts, budgets and recurring transactions."""

__version__ = "0.1.0"
