"""marksledger - exam marks ledger import and result computation service."""

__version__ = "1.0.0"
