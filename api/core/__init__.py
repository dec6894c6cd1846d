"""
Shared, cross-cutting code for the API.

`core/` holds the building blocks feature packages use (DB pool and record
gateway, error taxonomy, spreadsheet client). Keep feature-specific
tables and HTTP handling in the corresponding feature package (e.g. `designs/`).
"""
