"""Time-value-of-money, compound-growth and loan calculators."""

__version__ = "0.1.0"
