"""Shortcuts for running mutation commands inside service tests."""

from content_sync.schemas.content import LinkSetRequest, PublishRequest, UnpublishRequest
from content_sync.services.patch_link_set import PatchLinkSet
from content_sync.services.publish import Publish
from content_sync.services.put_content import PutContent
from content_sync.services.unpublish import Unpublish

from tests.builders import content_request


class Commands:
    def __init__(self, db, dispatch, locks, settings):
        self.args = (db, dispatch, locks, settings)

    async def put(self, content_id, **fields):
        return await PutContent(*self.args).call(content_id, content_request(**fields))

    async def publish(self, content_id, **fields):
        return await Publish(*self.args).call(content_id, PublishRequest(**fields))

    async def unpublish(self, content_id, **fields):
        fields.setdefault("type", "gone")
        return await Unpublish(*self.args).call(content_id, UnpublishRequest(**fields))

    async def patch_links(self, content_id, links, **fields):
        return await PatchLinkSet(*self.args).call(
            content_id, LinkSetRequest(links=links, **fields),
        )
