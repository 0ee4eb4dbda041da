"""FastAPI hub exposing the feature catalog and per-day analyses."""
