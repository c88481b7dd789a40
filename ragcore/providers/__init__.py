"""Concrete adapters for the interfaces in :mod:`ragcore.interfaces`."""
