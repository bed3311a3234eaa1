"""Accounts service: pin-verified registration, login and password reset."""
