"""Infrastructure Layer — external service clients and cross-cutting concerns.

Invariants:
    - Every external call has a deadline and maps failures to DownstreamTransportError
      or DownstreamRequestError
    - No client retries on its own; the work queue owns retry
"""
