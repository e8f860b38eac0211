"""POS back-office inventory ledger"""

__version__ = "1.0.0"
