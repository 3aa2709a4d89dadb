"""Route modules for the dashboard API."""
