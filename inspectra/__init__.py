"""Sequential approval workflows for trip requests and inspection reports."""

__version__ = "0.1.0"
