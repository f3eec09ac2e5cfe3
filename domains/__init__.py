"""Domain modules for the reminder notebook."""
