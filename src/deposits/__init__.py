"""Deposits bounded context."""
