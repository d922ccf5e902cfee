"""HTTP middleware for the shortlink application."""
