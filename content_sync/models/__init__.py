"""ORM Models — SQLAlchemy declarative models for all domain entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - Document is the aggregate root; editions, links and access limits hang off it
    - Event is append-only

Design Decisions:
    - One file per entity for locality
    - All models imported here so SQLAlchemy resolves string-based relationship()
      references before any query runs
"""

from content_sync.models.document import Document  # noqa: F401
from content_sync.models.edition import Edition  # noqa: F401
from content_sync.models.link import Link  # noqa: F401
from content_sync.models.access_limit import AccessLimit  # noqa: F401
from content_sync.models.event import Event  # noqa: F401
from content_sync.models.path_reservation import PathReservation  # noqa: F401
from content_sync.models.redirect import Redirect  # noqa: F401
from content_sync.models.sink_version import SinkVersion  # noqa: F401
