"""API routes, one module per resource. Registered explicitly in main.py."""
