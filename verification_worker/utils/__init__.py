"""Shared helpers for the verification worker."""
