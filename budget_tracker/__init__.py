"""
Budget Tracker - Source Package

A personal expense tracker's analytics engine: record expenses,
keep a monthly limit, score spending pace, and import expenses
from spreadsheets or SMS text.

DESIGN PRINCIPLES:
1. Every number is re-derived from the flat expense list
2. Invalid expenses never enter the working set
3. Parsers suggest, the user commits
4. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Budget Tracker Team"
