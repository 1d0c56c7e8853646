from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import partial
from typing import Callable

from app.core.config import Settings, settings
from app.core.form_store import FormDocumentStore
from app.core.interpreter import interpret_transcript
from app.core.voice_session import VoiceSessionController
from app.schemas.forms import FormDocument
from app.services.speech import Synthesizer, Transcriber, build_synthesizer, build_transcriber

logger = logging.getLogger(__name__)


@dataclass
class Builder:
    owner: str
    store: FormDocumentStore
    voice: VoiceSessionController

    @property
    def id(self) -> str:
        return self.store.id


class BuilderRegistry:
    """
    Open form builders, keyed by document id.

    A builder lives only in memory: closing it (or restarting the process)
    discards anything that was not saved.
    """

    def __init__(
        self,
        *,
        transcriber_factory: Callable[[], Transcriber],
        synthesizer_factory: Callable[[], Synthesizer | None] = lambda: None,
        feedback: bool = True,
        interpreter: Callable = interpret_transcript,
    ):
        self.transcriber_factory = transcriber_factory
        self.synthesizer_factory = synthesizer_factory
        self.feedback = feedback
        self.interpreter = interpreter
        self._builders: dict[str, Builder] = {}

    @classmethod
    def from_settings(cls, cfg: Settings) -> "BuilderRegistry":
        return cls(
            transcriber_factory=lambda: build_transcriber(cfg),
            synthesizer_factory=lambda: build_synthesizer(cfg),
            feedback=cfg.VOICE_FEEDBACK,
            interpreter=partial(interpret_transcript, loose_clauses=cfg.LOOSE_CLAUSE_MATCHING),
        )

    def open(self, owner: str, document: FormDocument | None = None) -> Builder:
        store = FormDocumentStore(document)
        voice = VoiceSessionController(
            store,
            self.transcriber_factory(),
            self.synthesizer_factory(),
            interpreter=self.interpreter,
            feedback=self.feedback,
        )
        builder = Builder(owner=owner, store=store, voice=voice)
        self._builders[builder.id] = builder
        logger.info("builder %s opened by %s", builder.id, owner)
        return builder

    def get(self, builder_id: str, owner: str) -> Builder | None:
        builder = self._builders.get(builder_id)
        if builder is None or builder.owner != owner:
            return None
        return builder

    async def close(self, builder_id: str, owner: str) -> bool:
        builder = self.get(builder_id, owner)
        if builder is None:
            return False
        await builder.voice.cancel()
        del self._builders[builder_id]
        logger.info("builder %s closed", builder_id)
        return True

    def __len__(self) -> int:
        return len(self._builders)


_registry: BuilderRegistry | None = None


def get_registry() -> BuilderRegistry:
    global _registry
    if _registry is None:
        _registry = BuilderRegistry.from_settings(settings)
    return _registry
