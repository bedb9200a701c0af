"""API middleware: structured request logging."""
