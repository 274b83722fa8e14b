import copy
import json
import logging

from factories import make_field, make_template
from form_engine.schemas.template import FormTemplate
from form_engine.submission import initial_values, submit, validate_values


def test_scenario_a_reports_every_failing_field(scenario_a):
    result = submit(scenario_a, {"Name": "", "Age": 200, "Email": "x"})
    assert result.ok is False
    assert result.data == {}
    assert result.errors == {
        "Name": "This field is required",
        "Age": "Must be at most 120",
        "Email": "Please enter a valid email address",
    }


def test_scenario_a_success_coerces_values(scenario_a):
    result = submit(scenario_a, {"Name": "Ada", "Age": "36", "Email": "ada@example.com"})
    assert result.ok is True
    assert result.errors == {}
    assert result.data == {"Name": "Ada", "Age": 36, "Email": "ada@example.com"}


def test_optional_absent_values_are_omitted(scenario_a):
    result = submit(scenario_a, {"Name": "Ada", "Email": "ada@example.com", "Age": ""})
    assert result.ok is True
    assert "Age" not in result.data


def test_scenario_b_hidden_required_field_is_skipped():
    tpl = make_template(
        [
            make_field("Country", "select", options=["US", "CA"], required=True),
            make_field("State", required=True, conditional={"dependsOn": "Country", "value": "US"}),
        ]
    )
    result = submit(tpl, {"Country": "CA"})
    assert result.ok is True
    assert result.hidden_field_ids == ["State"]
    assert result.data == {"Country": "CA"}

    result = submit(tpl, {"Country": "US"})
    assert result.ok is False
    assert result.errors == {"State": "This field is required"}


def test_hidden_values_pass_through_verbatim():
    tpl = make_template(
        [
            make_field("Country", "select", options=["US", "CA"]),
            make_field("Zip", "number", conditional={"dependsOn": "Country", "value": "US"}),
        ]
    )
    result = submit(tpl, {"Country": "CA", "Zip": "not a number"})
    assert result.ok is True
    assert result.data == {"Country": "CA", "Zip": "not a number"}


def test_unknown_keys_and_layout_fields_are_dropped():
    tpl = make_template([make_field("intro", "heading"), make_field("name")])
    result = submit(tpl, {"intro": "x", "name": "Ada", "extra": 1})
    assert result.ok is True
    assert result.data == {"name": "Ada"}
    assert result.hidden_field_ids == []


def test_type_specific_messages():
    tpl = make_template(
        [
            make_field("phone", "phone"),
            make_field("site", "url"),
            make_field("stars", "rating"),
            make_field("agree", "checkbox"),
            make_field("code", validation={"minLength": 3, "maxLength": 5, "pattern": "^[A-Z]+$"}),
            make_field("tags", "multiselect", options=["a", "b"]),
        ]
    )
    errors = validate_values(
        tpl,
        {"phone": "12345", "site": "nope", "stars": 6, "agree": "maybe", "code": "ab", "tags": [1]},
    )
    assert errors == {
        "phone": "Please enter a valid phone number",
        "site": "Please enter a valid URL",
        "stars": "Must be at most 5",
        "agree": "Please choose yes or no",
        "code": "Must be at least 3 characters",
        "tags": "Please select one or more options",
    }


def test_pattern_and_max_length():
    tpl = make_template([make_field("code", validation={"maxLength": 5, "pattern": "^[A-Z]+$"})])
    assert validate_values(tpl, {"code": "abc"}) == {"code": "Invalid format"}
    assert validate_values(tpl, {"code": "ABCDEFG"}) == {"code": "Must be at most 5 characters"}
    assert validate_values(tpl, {"code": "ABC"}) == {}


def test_required_checkbox_group_needs_a_selection():
    tpl = make_template([make_field("days", "checkboxGroup", options=["Mon", "Tue"], required=True)])
    assert validate_values(tpl, {"days": []}) == {"days": "This field is required"}
    assert submit(tpl, {"days": ["Tue"]}).data == {"days": ["Tue"]}


def test_submit_does_not_modify_inputs(scenario_a):
    tpl = FormTemplate.model_validate(scenario_a)
    before = tpl.model_dump()
    values = {"Name": "Ada", "Age": "36", "Email": "ada@example.com"}
    snapshot = copy.deepcopy(values)
    submit(tpl, values)
    assert tpl.model_dump() == before
    assert values == snapshot


def test_submission_log_line_omits_values(scenario_a, caplog):
    caplog.set_level(logging.INFO, logger="form_engine.submission")
    submit(scenario_a, {"Name": "secret-name", "Age": 200, "Email": "x"})
    lines = [r.getMessage() for r in caplog.records if r.name == "form_engine.submission"]
    assert len(lines) == 1
    record = json.loads(lines[0])
    assert record["ok"] is False
    assert record["error_fields"] == ["Age", "Email"]
    assert "secret-name" not in lines[0]


def test_initial_values():
    tpl = make_template(
        [
            make_field("title", "heading"),
            make_field("name", defaultValue="Ada"),
            make_field("agree", "checkbox"),
            make_field("on", "toggle", defaultValue=True),
            make_field("days", "checkboxGroup", options=["Mon"]),
            make_field("note", "textarea"),
        ]
    )
    assert initial_values(tpl) == {"name": "Ada", "agree": False, "on": True, "days": []}


def test_errors_land_on_ids_shaped_like_internal_names():
    tpl = make_template(
        [
            make_field("field_1", "email", required=True),
            make_field("name", required=True),
            make_field("field_0", "number", validation={"max": 3}),
        ]
    )
    result = submit(tpl, {"field_1": "bad", "name": "Ada", "field_0": 9})
    assert result.errors == {
        "field_1": "Please enter a valid email address",
        "field_0": "Must be at most 3",
    }

    result = submit(tpl, {"field_1": "ada@example.com", "field_0": 2})
    assert result.errors == {"name": "This field is required"}
