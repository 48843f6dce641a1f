"""
Stockbook - Source Package

A small shop's books kept in a Google Sheet, driven by WhatsApp
commands and a JSON API: stock, weighted-average cost, sales,
purchases, expenses, and the running cash/profit/capital summary.

DESIGN PRINCIPLES:
1. The accounting engine is the only writer of the books
2. Bad input is refused before anything is written
3. Failures come back as outcomes, never as crashes
4. Every command is auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Stockbook Team"
