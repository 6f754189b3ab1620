"""
nl2latex - describe a formula in words, get typeset LaTeX back.
"""

__version__ = "0.1.0"
