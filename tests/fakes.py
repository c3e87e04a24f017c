"""In-memory doubles for the downstream sinks and the error reporter."""

from content_sync.core.errors import DownstreamTransportError


class InMemoryContentStore:
    def __init__(self, name: str = "draft-content-store"):
        self.name = name
        self.puts: list[tuple[str | None, dict]] = []
        self.fail_with: Exception | None = None

    async def put_content(self, base_path, body):
        if self.fail_with is not None:
            raise self.fail_with
        self.puts.append((base_path, body))

    def versions(self) -> list[int]:
        return [body["payload_version"] for _, body in self.puts]

    def fail_unavailable(self):
        self.fail_with = DownstreamTransportError(self.name, "connection refused")


class InMemoryPublisher:
    def __init__(self):
        self.messages: list[tuple[str, dict]] = []

    async def send_message(self, routing_key, body):
        self.messages.append((routing_key, body))

    @property
    def routing_keys(self) -> list[str]:
        return [key for key, _ in self.messages]


class RecordingReporter:
    def __init__(self):
        self.reports: list[tuple[Exception, dict]] = []

    def report(self, error, context):
        self.reports.append((error, context))

    @property
    def errors(self) -> list[type]:
        return [type(error) for error, _ in self.reports]
