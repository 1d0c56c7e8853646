import pytest

from app.core.interpreter import interpret_transcript, summarize_delta
from app.schemas.forms import FormField
from tests.helpers import CountingIds, make_document


def interpret(transcript, document=None):
    return interpret_transcript(transcript, document or make_document(), id_factory=CountingIds())


@pytest.mark.parametrize(
    "transcript",
    ["", "   ", "hello there", "what is the weather like", "please make it nicer"],
)
def test_unrecognized_transcript_leaves_fields_unchanged(transcript):
    doc = make_document(FormField(id="a", type="text", label="Notes"), name="Feedback")
    result = interpret(transcript, doc)
    assert result.fields == doc.fields
    assert result.name == "Feedback"


def test_add_email_field():
    result = interpret("add an email field")
    assert len(result.fields) == 1
    f = result.fields[0]
    assert f.type == "email"
    assert f.label == "Email Address"
    assert f.required is False


def test_add_dropdown_for_country():
    result = interpret("add a dropdown field for country")
    (f,) = result.fields
    assert f.type == "select"
    assert f.label == "country"
    assert f.options == ["Option 1", "Option 2", "Option 3"]
    # "for country" names the field, not the form
    assert result.description == ""


def test_options_clause_updates_trailing_select_from_earlier_command():
    doc = make_document(
        FormField(id="a", type="text", label="Full Name"),
        FormField(id="b", type="select", label="Country"),
    )
    result = interpret("the options are USA, Canada, UK", doc)
    assert result.fields[-1].options == ["USA", "Canada", "UK"]
    assert result.fields[0] == doc.fields[0]


def test_options_clause_ignored_when_last_field_is_not_a_choice():
    doc = make_document(
        FormField(id="a", type="select", label="Country"),
        FormField(id="b", type="text", label="City"),
    )
    result = interpret("the options are USA, Canada, UK", doc)
    assert result.fields[0].options == ["Option 1", "Option 2", "Option 3"]
    assert result.fields[1].options is None


def test_options_in_same_command_as_field():
    result = interpret("add a radio button called Size with options small, medium or large")
    (f,) = result.fields
    assert f.type == "radio"
    assert f.label == "Size"
    assert f.options == ["small", "medium", "large"]


def test_required_applies_to_every_field_in_utterance():
    result = interpret("add a name field and an email field, make them required")
    assert [f.type for f in result.fields] == ["text", "email"]
    assert all(f.required for f in result.fields)


def test_required_does_not_touch_existing_fields():
    doc = make_document(FormField(id="a", type="text", label="Notes"))
    result = interpret("add a date field, it is mandatory", doc)
    assert result.fields[0].required is False
    assert result.fields[1].required is True


def test_required_retrofit_matches_label_substring():
    doc = make_document(
        FormField(id="a", type="text", label="Full Name"),
        FormField(id="b", type="email", label="Email Address"),
        FormField(id="c", type="text", label="Company Name"),
    )
    result = interpret("make the name field required", doc)
    assert [f.required for f in result.fields] == [True, False, True]


def test_remove_field_by_label_substring():
    doc = make_document(
        FormField(id="a", type="text", label="Full Name"),
        FormField(id="b", type="email", label="Email Address"),
    )
    result = interpret("remove the name field", doc)
    assert [f.id for f in result.fields] == ["b"]


def test_remove_is_broad_when_several_labels_match():
    doc = make_document(
        FormField(id="a", type="text", label="First Name"),
        FormField(id="b", type="text", label="Last Name"),
        FormField(id="c", type="email", label="Email Address"),
    )
    result = interpret("remove the name field", doc)
    assert [f.id for f in result.fields] == ["c"]


def test_remove_runs_after_creation():
    result = interpret("add a phone number and then remove the phone field")
    assert result.fields == []


def test_name_from_create_form_phrase():
    result = interpret("Create a customer feedback form about our new product")
    assert result.name == "customer feedback"
    assert result.description == "our new product"


def test_form_kind_not_used_once_named():
    doc = make_document(name="Signup")
    result = interpret("create a contact form", doc)
    assert result.name == "Signup"


def test_explicit_title_renames_form():
    doc = make_document(name="Signup")
    result = interpret('rename the form, make a form called "Event Registration"', doc)
    assert result.name == "Event Registration"


def test_field_called_does_not_rename_form():
    result = interpret("add a field called Team")
    assert result.name == ""
    assert result.fields[0].label == "Team"


def test_full_command():
    result = interpret(
        "Create a job application form. Add a first name field, a last name field and an email field. "
        "Add a dropdown field for position with options engineer, designer and manager."
    )
    assert result.name == "job application"
    labels = [f.label for f in result.fields]
    assert "First Name" in labels
    assert "Email Address" in labels
    assert result.fields[-1].type == "select"
    assert result.fields[-1].options == ["engineer", "designer", "manager"]


def test_new_fields_get_fresh_ids():
    ids = CountingIds(prefix="new-")
    doc = make_document(FormField(id="a", type="text", label="Notes"))
    result = interpret_transcript("add a date field and a time field", doc, id_factory=ids)
    assert [f.id for f in result.fields] == ["a", "new-1", "new-2"]


def test_interpret_does_not_mutate_input_document():
    doc = make_document(FormField(id="a", type="select", label="Country"))
    interpret("the options are A, B. make the country field required", doc)
    assert doc.fields[0].options == ["Option 1", "Option 2", "Option 3"]
    assert doc.fields[0].required is False


def test_noop_is_idempotent():
    doc = make_document(FormField(id="a", type="text", label="Notes"))
    once = interpret("nothing to see here", doc)
    twice = interpret("nothing to see here", doc.model_copy(update={"fields": once.fields}))
    assert [f.model_dump() for f in twice.fields] == [f.model_dump() for f in doc.fields]


def test_summarize_delta():
    before = [FormField(id="a", type="text"), FormField(id="b", type="email"), FormField(id="c", type="date")]
    after = [before[0], before[1].model_copy(update={"required": True}), FormField(id="d", type="time")]
    delta = summarize_delta(before, after)
    assert delta.added == ["d"]
    assert delta.updated == ["b"]
    assert delta.removed == ["c"]
    assert not delta.is_empty
    assert summarize_delta(after, after).is_empty


def test_options_with_and_do_not_create_fields():
    doc = make_document(
        FormField(id="a", type="text", label="Full Name"),
        FormField(id="b", type="radio", label="Contact method"),
    )
    result = interpret("the options are Phone and Email", doc)
    assert [f.id for f in result.fields] == ["a", "b"]
    assert result.fields[-1].options == ["Phone", "Email"]


def test_remove_two_fields_joined_by_and():
    doc = make_document(
        FormField(id="a", type="text", label="Full Name"),
        FormField(id="b", type="tel", label="Phone Number"),
        FormField(id="c", type="email", label="Email Address"),
    )
    result = interpret("remove the phone and email fields", doc)
    assert [f.id for f in result.fields] == ["a"]


def test_make_two_fields_required_joined_by_and():
    doc = make_document(
        FormField(id="a", type="tel", label="Phone Number"),
        FormField(id="b", type="email", label="Email Address"),
    )
    result = interpret("make the phone and email fields required", doc)
    assert [f.id for f in result.fields] == ["a", "b"]
    assert all(f.required for f in result.fields)


def test_and_continues_a_creation_verb():
    result = interpret("add a name field and an email field")
    assert [f.type for f in result.fields] == ["text", "email"]


def test_removal_after_creation_in_one_utterance():
    doc = make_document(
        FormField(id="a", type="tel", label="Phone Number"),
        FormField(id="b", type="email", label="Email Address"),
    )
    result = interpret("add a name field and remove the phone and email fields", doc)
    assert [f.label for f in result.fields] == ["Full Name"]


def test_options_clause_stops_at_next_command():
    result = interpret("add a radio called Size with options small, medium and large, and add an email field")
    by_type = {f.type: f for f in result.fields}
    assert set(by_type) == {"radio", "email"}
    assert by_type["radio"].label == "Size"
    assert by_type["radio"].options == ["small", "medium", "large"]


def test_loose_clauses_rename_form_from_field_name():
    result = interpret_transcript(
        "add a field called Team", make_document(), id_factory=CountingIds(), loose_clauses=True
    )
    assert result.name == "Team"
    assert result.fields[0].label == "Team"


def test_loose_clauses_take_description_from_field_phrase():
    result = interpret_transcript(
        "add a dropdown field for country", make_document(), id_factory=CountingIds(), loose_clauses=True
    )
    assert result.description == "country"
    assert result.fields[0].label == "country"
