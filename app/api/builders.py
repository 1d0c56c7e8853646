from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from sqlalchemy.orm import Session

from app.core.audit import FORM_SAVED, log_event
from app.core.builders import Builder, BuilderRegistry, get_registry
from app.core.config import settings
from app.core.errors import FieldNotFoundError, SessionBusyError, ValidationError
from app.core.form_repository import SqlFormRepository
from app.core.security import CurrentUser, get_current_user
from app.core.voice_session import BufferedAudioCapture
from app.db.session import get_db
from app.schemas.forms import (
    CommandIn,
    CommandOut,
    FieldCreate,
    FieldUpdate,
    FormDetailsUpdate,
    FormDocument,
    FormField,
    FormSummaryOut,
    SaveFormIn,
    SaveFormOut,
)
from app.schemas.voice import VoiceOutcomeOut, VoiceStateOut, outcome_out, state_out

router = APIRouter(prefix="/builders", tags=["builders"])


def _builder_or_404(registry: BuilderRegistry, builder_id: str, user: CurrentUser) -> Builder:
    builder = registry.get(builder_id, user.email)
    if not builder:
        raise HTTPException(status_code=404, detail="Builder not found")
    return builder


def _field_not_found(exc: FieldNotFoundError) -> HTTPException:
    return HTTPException(status_code=404, detail=exc.message)


@router.post("", response_model=FormDocument, status_code=status.HTTP_201_CREATED)
def open_builder(
    registry: BuilderRegistry = Depends(get_registry),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Open an empty form builder."""
    builder = registry.open(current_user.email)
    return builder.store.document


@router.get("/{builder_id}", response_model=FormDocument)
def get_builder(
    builder_id: str,
    registry: BuilderRegistry = Depends(get_registry),
    current_user: CurrentUser = Depends(get_current_user),
):
    return _builder_or_404(registry, builder_id, current_user).store.document


@router.patch("/{builder_id}", response_model=FormDocument)
def update_details(
    builder_id: str,
    payload: FormDetailsUpdate,
    registry: BuilderRegistry = Depends(get_registry),
    current_user: CurrentUser = Depends(get_current_user),
):
    store = _builder_or_404(registry, builder_id, current_user).store
    if payload.name is not None:
        store.set_name(payload.name)
    if payload.description is not None:
        store.set_description(payload.description)
    return store.document


@router.delete("/{builder_id}", status_code=status.HTTP_204_NO_CONTENT)
async def close_builder(
    builder_id: str,
    registry: BuilderRegistry = Depends(get_registry),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Close the builder; unsaved changes are discarded."""
    if not await registry.close(builder_id, current_user.email):
        raise HTTPException(status_code=404, detail="Builder not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ----------------- manual field editing -----------------

@router.post("/{builder_id}/fields", response_model=FormField, status_code=status.HTTP_201_CREATED)
def add_field(
    builder_id: str,
    payload: FieldCreate,
    registry: BuilderRegistry = Depends(get_registry),
    current_user: CurrentUser = Depends(get_current_user),
):
    store = _builder_or_404(registry, builder_id, current_user).store
    return store.add_field(payload.type, **payload.model_dump(exclude={"type"}))


@router.patch("/{builder_id}/fields/{field_id}", response_model=FormField)
def update_field(
    builder_id: str,
    field_id: str,
    payload: FieldUpdate,
    registry: BuilderRegistry = Depends(get_registry),
    current_user: CurrentUser = Depends(get_current_user),
):
    store = _builder_or_404(registry, builder_id, current_user).store
    try:
        return store.update_field(field_id, payload)
    except FieldNotFoundError as e:
        raise _field_not_found(e)


@router.delete("/{builder_id}/fields/{field_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_field(
    builder_id: str,
    field_id: str,
    registry: BuilderRegistry = Depends(get_registry),
    current_user: CurrentUser = Depends(get_current_user),
):
    store = _builder_or_404(registry, builder_id, current_user).store
    try:
        store.delete_field(field_id)
    except FieldNotFoundError as e:
        raise _field_not_found(e)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{builder_id}/fields/{field_id}/options", response_model=FormField)
def add_option(
    builder_id: str,
    field_id: str,
    registry: BuilderRegistry = Depends(get_registry),
    current_user: CurrentUser = Depends(get_current_user),
):
    store = _builder_or_404(registry, builder_id, current_user).store
    try:
        return store.add_option(field_id)
    except FieldNotFoundError as e:
        raise _field_not_found(e)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.message)


@router.delete("/{builder_id}/fields/{field_id}/options/{index}", response_model=FormField)
def remove_option(
    builder_id: str,
    field_id: str,
    index: int,
    registry: BuilderRegistry = Depends(get_registry),
    current_user: CurrentUser = Depends(get_current_user),
):
    store = _builder_or_404(registry, builder_id, current_user).store
    try:
        return store.remove_option(field_id, index)
    except FieldNotFoundError as e:
        raise _field_not_found(e)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.message)


# ----------------- voice -----------------

@router.post("/{builder_id}/commands", response_model=CommandOut)
def run_command(
    builder_id: str,
    payload: CommandIn,
    registry: BuilderRegistry = Depends(get_registry),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Apply a typed command, exactly as if it had been spoken."""
    builder = _builder_or_404(registry, builder_id, current_user)
    transcript = payload.transcript.strip()
    delta = builder.voice.apply_transcript(transcript)
    return CommandOut(transcript=transcript, delta=delta, form=builder.store.document)


@router.post("/{builder_id}/voice", response_model=VoiceOutcomeOut)
async def submit_voice(
    builder_id: str,
    request: Request,
    registry: BuilderRegistry = Depends(get_registry),
    current_user: CurrentUser = Depends(get_current_user),
):
    """
    Body is the raw recording; Content-Type is passed on as the mime hint.
    With the browser fallback the body is the recognised text (text/plain).
    """
    builder = _builder_or_404(registry, builder_id, current_user)
    audio = await request.body()
    mime_type = request.headers.get("content-type", "application/octet-stream")

    try:
        outcome = await builder.voice.process(BufferedAudioCapture(audio, mime_type))
    except SessionBusyError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.message)

    return outcome_out(outcome, builder.store.document)


@router.get("/{builder_id}/voice", response_model=VoiceStateOut)
def voice_state(
    builder_id: str,
    registry: BuilderRegistry = Depends(get_registry),
    current_user: CurrentUser = Depends(get_current_user),
):
    return state_out(_builder_or_404(registry, builder_id, current_user).voice)


@router.get("/{builder_id}/summary", response_model=FormSummaryOut)
def form_summary(
    builder_id: str,
    registry: BuilderRegistry = Depends(get_registry),
    current_user: CurrentUser = Depends(get_current_user),
):
    store = _builder_or_404(registry, builder_id, current_user).store
    return FormSummaryOut(summary=store.summary(), field_count=len(store.document.fields))


@router.post("/{builder_id}/summary/speech")
async def speak_summary(
    builder_id: str,
    registry: BuilderRegistry = Depends(get_registry),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Read the form summary aloud (audio/mpeg)."""
    builder = _builder_or_404(registry, builder_id, current_user)
    _, audio = await builder.voice.read_summary()
    if not audio:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Speech synthesis unavailable")
    return Response(content=audio, media_type="audio/mpeg")


# ----------------- save -----------------

@router.post("/{builder_id}/save", response_model=SaveFormOut)
def save_form(
    builder_id: str,
    payload: SaveFormIn,
    db: Session = Depends(get_db),
    registry: BuilderRegistry = Depends(get_registry),
    current_user: CurrentUser = Depends(get_current_user),
):
    store = _builder_or_404(registry, builder_id, current_user).store
    repo = SqlFormRepository(db, share_base_url=settings.SHARE_BASE_URL, owner_email=current_user.email)

    def _commit():
        log_event(
            db=db,
            actor_email=current_user.email,
            action=FORM_SAVED,
            entity_type="form",
            entity_id=store.id,
            metadata={"name": store.document.name, "field_count": len(store.document.fields)},
        )
        db.commit()

    try:
        share_url = store.save(repo, is_public=payload.is_public, commit=_commit)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.message)
    return SaveFormOut(share_url=share_url, form=store.document)
