"""permset - permission sets and rule-based authorization."""

__version__ = "0.1.0"
