"""Toolkit adapters for the widget capabilities."""
