"""
IOU Ledger - Hours reconciliation for a plain-text IOU ledger.

Pulls logged hours from Baserow and Beeminder, reconciles them against an
existing hand-edited ledger and regenerates the ledger text.
"""

__version__ = "0.1.0"
