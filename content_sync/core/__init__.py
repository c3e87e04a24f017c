"""Core Layer — pure domain rules, payload shaping and cursor handling. No DB, no HTTP.

Invariants:
    - No module in core/ imports from services/, repositories/, api/,
      infrastructure/ or db/
    - Functions are deterministic; keyed_lock.py is the one stateful primitive

Design Decisions:
    - Functional core, imperative shell: repositories load rows, core decides,
      services write and dispatch
"""
