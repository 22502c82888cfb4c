"""
LeadPoet Verification Worker
============================

Periodic reconciliation worker for bulk email verification batches.

Features:
- Polls EmailListVerify file jobs for completion
- Downloads and parses categorized result lists
- Reconciles provider categories against campaign leads
- Marks every submitted email with a terminal verification status
"""

__version__ = "1.0.0"
__author__ = "LeadPoet Team"
