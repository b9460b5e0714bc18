"""Concrete implementations of the ROSTER interfaces."""
