"""Drilling event ingestion: spreadsheet parsing, normalization and de-duplication."""

__version__ = "0.1.0"
