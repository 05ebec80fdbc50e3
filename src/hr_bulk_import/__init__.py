"""Bulk employee registration from spreadsheets for the HR leave-management backend."""

__version__ = "0.1.0"
