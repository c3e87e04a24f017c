"""Declarative base shared by every model; engines live in infrastructure/database.py."""
