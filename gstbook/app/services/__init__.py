"""Service layer helpers for invoicing and reports."""
