"""Google Sheets mirror of the tickets table."""
