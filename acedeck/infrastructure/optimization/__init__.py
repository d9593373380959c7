"""Optimization Services.

Token estimation used to keep narration input within budget.
"""
