import asyncio

from scripts.voice_command import run


def test_runs_transcripts_in_order():
    store = asyncio.run(run(["create a contact form", "add a dropdown field for topic", "options are sales, support"], [], None))
    doc = store.document
    assert doc.name == "contact"
    assert doc.fields[0].label == "topic"
    assert doc.fields[0].options == ["sales", "support"]


def test_audio_goes_through_configured_transcriber(tmp_path):
    """Tests run with the browser backend, which reads text/plain transcripts"""
    recording = tmp_path / "command.txt"
    recording.write_text("add a website field")

    store = asyncio.run(run([], [recording], "text/plain"))

    assert [f.type for f in store.document.fields] == ["url"]


def test_loose_flag_lets_field_names_rename_the_form():
    assert asyncio.run(run(["add a field called Team"], [], None)).document.name == ""
    assert asyncio.run(run(["add a field called Team"], [], None, loose=True)).document.name == "Team"
