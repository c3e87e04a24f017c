"""Request builders with sensible defaults for a pathed guide."""

from content_sync.schemas.content import ContentRequest


def content_request(**overrides) -> ContentRequest:
    fields = {
        "base_path": "/vat-rates",
        "title": "VAT rates",
        "description": "Current VAT rates",
        "details": {"body": "<p>20%</p>"},
        "schema_name": "guide",
        "document_type": "guide",
        "update_type": "major",
        "publishing_app": "publisher",
    }
    fields.update(overrides)
    return ContentRequest(**fields)
