"""Supabase access for verification batches and leads."""
