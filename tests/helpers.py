from datetime import datetime, timedelta, timezone

from app.core.errors import VoiceFormError
from app.core.form_store import FormDocumentStore
from app.schemas.forms import FormDocument, FormField

EPOCH = datetime(2024, 1, 1, tzinfo=timezone.utc)


class FrozenClock:
    """Clock that only moves when told to."""

    def __init__(self, start: datetime = EPOCH):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float = 1) -> None:
        self.now += timedelta(seconds=seconds)


class CountingIds:
    def __init__(self, prefix: str = "f"):
        self.prefix = prefix
        self.n = 0

    def __call__(self) -> str:
        self.n += 1
        return f"{self.prefix}{self.n}"


def make_store(*types_and_labels: tuple[str, str], name: str = "") -> FormDocumentStore:
    """Store with a frozen clock, counting field ids and the given (type, label) fields."""
    clock = FrozenClock()
    store = FormDocumentStore(make_document(), clock=clock, id_factory=CountingIds())
    for field_type, label in types_and_labels:
        store.add_field(field_type, label=label)
    if name:
        store.set_name(name)
    return store


def make_document(*fields: FormField, name: str = "") -> FormDocument:
    return FormDocument(id="doc-1", name=name, fields=list(fields), created_at=EPOCH, updated_at=EPOCH)


class FakeTranscriber:
    name = "fake"

    def __init__(self, transcript: str = "", error: Exception | None = None):
        self.transcript = transcript
        self.error = error
        self.calls: list[tuple[bytes, str]] = []

    async def transcribe(self, audio: bytes, mime_type: str) -> str:
        self.calls.append((audio, mime_type))
        if self.error:
            raise self.error
        return self.transcript


class FakeSynthesizer:
    def __init__(self, error: VoiceFormError | None = None):
        self.error = error
        self.spoken: list[str] = []

    async def synthesize(self, text: str) -> bytes:
        self.spoken.append(text)
        if self.error:
            raise self.error
        return b"ID3" + text.encode("utf-8")


class FakeCapture:
    """AudioCapture that records what the controller did with it."""

    def __init__(self, data: bytes = b"audio", mime_type: str = "audio/webm", fail_on_open: Exception | None = None):
        self.data = data
        self.mime_type = mime_type
        self.fail_on_open = fail_on_open
        self.opened = False
        self.release_count = 0

    async def open(self) -> None:
        self.opened = True
        if self.fail_on_open:
            raise self.fail_on_open

    async def read(self) -> bytes:
        return self.data

    async def release(self) -> None:
        self.release_count += 1


def user_headers(email: str = "maker@local.test") -> dict[str, str]:
    return {"X-User-Email": email}
