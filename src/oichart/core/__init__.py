"""Windowed refresh and normalization pipeline."""
