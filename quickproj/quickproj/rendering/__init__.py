"""Placeholder extraction, safe rendering and file output."""
