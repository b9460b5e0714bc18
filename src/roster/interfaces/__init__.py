"""Ports between the service layer and the adapters."""
