"""Synthetic data generators for demos and tests."""
