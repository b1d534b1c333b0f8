"""Upstream access and record decoding."""
