"""Wealth Tracker - personal portfolio tracking backend.

This repository is intentionally small:
- The API is a thin CRUD layer over four tables.
- The client (library + CLI) owns view state and the portfolio summary.

Core concepts:
- A *transaction* is a Buy, Sell or Dividend of some scheme (fund, stock, deposit).
- Asset types, platforms and accounts are free-form reference lists cited by name.

See README for setup and usage.
"""

__all__ = ["__version__"]

__version__ = "0.1.0"
