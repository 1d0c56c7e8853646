from app.core import command_patterns as cp


def _types(transcript):
    return [(m.field_type, m.label) for m in cp.match_fields(transcript)]


def test_text_field_called():
    assert _types("add a field called Favourite Colour") == [("text", "Favourite Colour")]


def test_text_field_keeps_spoken_casing():
    assert _types("Add an input field for Job Title") == [("text", "Job Title")]


def test_entity_fields_use_fixed_labels():
    assert _types("add a first name field") == [("text", "First Name")]
    assert _types("add a last name field") == [("text", "Last Name")]
    assert _types("include a company field") == [("text", "Company")]
    assert _types("create an address field") == [("text", "Address")]


def test_email_and_phone_without_field_word():
    assert _types("add an email address") == [("email", "Email Address")]
    assert _types("add a phone number") == [("tel", "Phone Number")]


def test_select_with_and_without_name():
    assert _types("add a dropdown field for country") == [("select", "country")]
    assert _types("add a dropdown field") == [("select", "Select")]


def test_radio_and_checkbox():
    assert _types("add a radio button called Gender") == [("radio", "Gender")]
    assert _types("add a checkbox for terms") == [("checkbox", "terms")]


def test_other_input_types():
    assert _types("add a date field") == [("date", "Date")]
    assert _types("add an age field") == [("number", "Number")]
    assert _types("add a comments field") == [("textarea", "Comments")]
    assert _types("add an upload field") == [("file", "File Upload")]
    assert _types("add a website field") == [("url", "Website")]
    assert _types("add a time field") == [("time", "Time")]
    assert _types("add a rating field") == [("range", "Range")]
    assert _types("add a color picker") == [("color", "Color")]
    assert _types("add a password field") == [("password", "Password")]


def test_patterns_fire_repeatedly():
    """The same phrasing mentioned twice creates two fields"""
    matches = cp.match_fields("add a field called Colour and add a field called Size")
    assert [(m.field_type, m.label) for m in matches] == [("text", "Colour"), ("text", "Size")]


def test_patterns_are_non_exclusive():
    matches = cp.match_fields("add a name field and an email field")
    assert sorted(m.field_type for m in matches) == ["email", "text"]


def test_label_stops_at_clause_words():
    assert _types("add a dropdown field for country with options USA, Canada") == [("select", "country")]
    assert _types("add a field called Notes, make it required") == [("text", "Notes")]


def test_no_match_for_plain_text():
    assert cp.match_fields("hello there, how are you today") == []


def test_match_spans_point_into_transcript():
    transcript = "please add a date field now"
    (m,) = cp.match_fields(transcript)
    assert transcript[m.span[0]:m.span[1]] == "add a date field"


def test_extract_form_title():
    assert cp.extract_form_title('create a form called "Event Signup"') == "Event Signup"
    assert cp.extract_form_title("a survey named Team Pulse") == "Team Pulse"
    assert cp.extract_form_title("add a field called Notes") is None


def test_extract_form_kind():
    assert cp.extract_form_kind("Create a customer feedback form") == "customer feedback"
    assert cp.extract_form_kind("build a new registration form") == "registration"
    assert cp.extract_form_kind("create a survey form") == "survey"
    assert cp.extract_form_kind("make a form") is None


def test_extract_description_skips_field_spans():
    transcript = "add a dropdown field for country"
    spans = [m.span for m in cp.match_fields(transcript)]
    assert cp.extract_description(transcript, spans) is None
    assert cp.extract_description("a form about our new product") == "our new product"
    assert cp.extract_description("description: quarterly check-in, add a name field") == "quarterly check-in"


def test_extract_options():
    assert cp.extract_options("the options are USA, Canada, UK") == ["USA", "Canada", "UK"]
    assert cp.extract_options("choices include red and blue or green") == ["red", "blue", "green"]
    assert cp.extract_options("options: A, , B") == ["A", "B"]
    assert cp.extract_options("no list here") is None


def test_extract_required_targets():
    assert cp.extract_required_targets("make the email field required") == ["email"]
    assert cp.extract_required_targets("make phone mandatory") == ["phone"]
    assert cp.extract_required_targets("add a name field") == []


def test_extract_removal_targets():
    assert cp.extract_removal_targets("remove the name field") == ["name"]
    assert cp.extract_removal_targets("delete phone field and remove the company field") == ["phone", "company"]


def test_mentions_required():
    assert cp.mentions_required("all of these are Required")
    assert cp.mentions_required("mandatory please")
    assert not cp.mentions_required("optional")


def test_and_is_only_a_verb_after_a_creation_verb():
    assert _types("and an email field") == []
    assert _types("add a name field and an email field") == [("text", "Full Name"), ("email", "Email Address")]


def test_no_fields_inside_edit_clauses():
    assert cp.match_fields("remove the phone and email fields") == []
    assert cp.match_fields("make the phone and email fields required") == []
    assert cp.match_fields("the options are Phone and Email") == []


def test_edit_clause_spans():
    transcript = "add a name field and remove the phone and email fields"
    ((start, end),) = cp.edit_clause_spans(transcript)
    assert transcript[start:end] == "remove the phone and email fields"
    assert _types(transcript) == [("text", "Full Name")]


def test_targets_split_on_and():
    assert cp.extract_removal_targets("remove the phone and email fields") == ["phone", "email"]
    assert cp.extract_required_targets("make the phone and email fields required") == ["phone", "email"]


def test_extract_form_title_loose():
    assert cp.extract_form_title("add a field called Team") is None
    assert cp.extract_form_title("add a field called Team", loose=True) == "Team"
