"""Integrations with the token store, the database and the session cookie."""
