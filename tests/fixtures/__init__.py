"""Test fixtures for DocExport."""
