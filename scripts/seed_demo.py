# seed_demo.py
"""
Create the schema (if missing) and save a demo form built from voice commands.
"""
from app.core.config import settings
from app.core.form_repository import SqlFormRepository
from app.core.form_store import FormDocumentStore
from app.core.interpreter import interpret_transcript
from app.db.base import Base
from app.db.session import SessionLocal, engine

DEMO_OWNER = "demo@local.test"

DEMO_COMMANDS = [
    "Create a customer feedback form about our new product",
    "Add a name field and an email field, make them required",
    "Add a dropdown field for country with options USA, Canada and UK",
    "Add a rating field and a comment field",
]


def main():
    Base.metadata.create_all(bind=engine)

    store = FormDocumentStore()
    for command in DEMO_COMMANDS:
        store.apply_update(interpret_transcript(command, store.document, id_factory=store.id_factory))

    db = SessionLocal()
    try:
        repo = SqlFormRepository(db, share_base_url=settings.SHARE_BASE_URL, owner_email=DEMO_OWNER)
        share_url = store.save(repo, is_public=True)
        db.commit()
        print(f"Demo form '{store.document.name}' saved with {len(store.document.fields)} fields")
        print("Share URL:", share_url)
    finally:
        db.close()


if __name__ == "__main__":
    main()
