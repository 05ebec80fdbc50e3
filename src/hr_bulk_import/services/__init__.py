"""Bulk import session orchestration, progress display and summary rendering."""
