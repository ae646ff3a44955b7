"""Quota accounting for video provider calls."""

from vca.quota.ledger import QUOTA_COST, QuotaEvent, QuotaLedger, QuotaSnapshot

__all__ = ["QUOTA_COST", "QuotaEvent", "QuotaLedger", "QuotaSnapshot"]
