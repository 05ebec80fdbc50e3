"""Spreadsheet decoding (pandas)."""
