"""Terminal front ends."""
