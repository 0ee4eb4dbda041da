"""Baseline estimation, z-score scoring and the per-day analysis pipeline."""
