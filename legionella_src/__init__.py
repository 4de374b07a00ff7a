"""Legionella UFC calculator.

Interprets direct and filtration plate counts of water samples into
Legionella concentrations (UFC/L) following fixed laboratory thresholds.
"""

__version__ = "2.2.0"
