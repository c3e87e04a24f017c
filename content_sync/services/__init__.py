"""Services Layer — mutation commands, downstream worker, pagination and dispatch.

Invariants:
    - Commands own their transaction: commit on success, rollback on any exception
    - Downstream jobs are enqueued only after commit

Design Decisions:
    - One command class per mutation endpoint, constructed per request with the
      session and injected collaborators
"""
