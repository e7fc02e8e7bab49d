"""Operator scripts for the resale admin."""
