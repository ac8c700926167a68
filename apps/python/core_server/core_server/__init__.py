"""Kollabs API server application."""
