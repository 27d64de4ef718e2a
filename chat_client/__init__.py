"""Polling chat client for the mirart chat and support chat REST APIs."""
