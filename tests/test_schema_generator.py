import pytest
from pydantic_core import PydanticCustomError

from factories import make_field, make_template
from form_engine.config import EngineSettings
from form_engine.constraints import (
    BooleanConstraint,
    BoundedConstraint,
    EmailConstraint,
    NumericConstraint,
    PhoneConstraint,
    StringArrayConstraint,
    TextConstraint,
    UnconstrainedConstraint,
    UrlConstraint,
    check_value,
    constraint_for_field,
    is_absent,
)
from form_engine.schema_generator import generate, template_fingerprint
from form_engine.schemas.template import FieldDefinition, FormTemplate


def _constraint(field_type, **extra):
    rule = constraint_for_field(FieldDefinition.model_validate(make_field("f", field_type, **extra)))
    return rule.constraint if rule else None


def test_constraint_per_type():
    assert isinstance(_constraint("email"), EmailConstraint)
    assert _constraint("phone") == PhoneConstraint(min_length=10)
    assert isinstance(_constraint("url"), UrlConstraint)
    assert _constraint("number", validation={"min": 1, "max": 9}) == NumericConstraint(min=1, max=9)
    assert _constraint("rating") == BoundedConstraint(min=1, max=5)
    assert isinstance(_constraint("checkbox"), BooleanConstraint)
    assert isinstance(_constraint("toggle"), BooleanConstraint)
    assert isinstance(_constraint("checkboxGroup"), StringArrayConstraint)
    assert isinstance(_constraint("multiselect"), StringArrayConstraint)
    assert isinstance(_constraint("file"), UnconstrainedConstraint)
    assert isinstance(_constraint("date"), TextConstraint)
    assert _constraint("select") == TextConstraint()


def test_layout_fields_have_no_constraint():
    for t in ("heading", "paragraph", "divider"):
        assert _constraint(t) is None


def test_unknown_type_becomes_optional_text():
    rule = constraint_for_field(FieldDefinition.model_validate(make_field("f", "colour", required=True)))
    assert rule.required is False
    assert rule.constraint == TextConstraint()


def test_zero_lengths_and_invalid_pattern_are_ignored():
    c = _constraint("text", validation={"minLength": 0, "maxLength": 0, "pattern": "(["})
    assert c == TextConstraint()


def test_text_bounds_are_carried():
    c = _constraint("textarea", validation={"minLength": 2, "maxLength": 8, "pattern": "^a"})
    assert c == TextConstraint(min_length=2, max_length=8, pattern="^a")


def test_phone_min_length_from_settings():
    f = FieldDefinition.model_validate(make_field("p", "phone"))
    assert constraint_for_field(f, phone_min_length=7).constraint.min_length == 7


def test_check_value_coercions():
    assert check_value(NumericConstraint(), "2.5") == 2.5
    assert check_value(NumericConstraint(), " 7 ") == 7
    assert check_value(BoundedConstraint(), "4") == 4
    assert check_value(BoundedConstraint(), 3.0) == 3
    assert check_value(BooleanConstraint(), "yes") is True
    assert check_value(BooleanConstraint(), 0) is False
    assert check_value(StringArrayConstraint(), "a") == ["a"]
    assert check_value(TextConstraint(), 12) == "12"
    assert check_value(UnconstrainedConstraint(), {"name": "cv.pdf"}) == {"name": "cv.pdf"}


def test_check_value_messages():
    cases = [
        (NumericConstraint(), True, "Please enter a number"),
        (NumericConstraint(), "abc", "Please enter a number"),
        (NumericConstraint(min=0), -1, "Must be at least 0"),
        (NumericConstraint(max=1.5), 2, "Must be at most 1.5"),
        (BoundedConstraint(), 2.5, "Please enter a whole number"),
        (BoundedConstraint(), 0, "Must be at least 1"),
        (TextConstraint(), ["a"], "Please enter text"),
        (EmailConstraint(), "a@b", "Please enter a valid email address"),
    ]
    for constraint, value, message in cases:
        with pytest.raises(PydanticCustomError) as exc:
            check_value(constraint, value)
        assert exc.value.message() == message


def test_email_accepts_common_addresses():
    assert check_value(EmailConstraint(), "first.last+tag@mail.example.co") == "first.last+tag@mail.example.co"


def test_is_absent():
    assert is_absent(None)
    assert is_absent("   ")
    assert is_absent([])
    assert not is_absent(0)
    assert not is_absent(False)


def test_validator_validates_all_fields_at_once(scenario_a):
    v = generate(scenario_a)
    assert v.field_ids == ["Name", "Age", "Email"]
    data, errors = v.validate({"Age": "x"})
    assert data == {}
    assert errors == {
        "Name": "This field is required",
        "Age": "Please enter a number",
        "Email": "This field is required",
    }


def test_validator_only_subset(scenario_a):
    v = generate(scenario_a)
    data, errors = v.validate({"Age": 40, "Email": "not"}, only=["Age"])
    assert errors == {}
    assert data == {"Age": 40}


def test_generated_validator_is_cached_by_structure(scenario_a):
    first = generate(scenario_a)
    assert generate(scenario_a) is first

    touched = dict(scenario_a, updated_at="2030-01-01T00:00:00+00:00")
    assert generate(touched) is first

    changed = make_template(
        [
            make_field("Name", "text", required=True),
            make_field("Age", "number", width="half", validation={"min": 0, "max": 99}),
            make_field("Email", "email", width="half", required=True),
        ]
    )
    assert generate(changed) is not first


def test_cache_disabled_builds_fresh_validators(scenario_a):
    s = EngineSettings(schema_cache_size=0)
    assert generate(scenario_a, settings=s) is not generate(scenario_a, settings=s)


def test_fingerprint_ignores_timestamps(scenario_a):
    a = FormTemplate.model_validate(scenario_a)
    b = a.model_copy(update={"updated_at": "later"})
    assert template_fingerprint(a) == template_fingerprint(b)
    assert template_fingerprint(a) != template_fingerprint(a, phone_min_length=7)


def test_generate_never_raises_on_bad_template_content():
    tpl = make_template(
        [
            make_field("a", "mystery", required=True),
            make_field("b", validation={"pattern": "(["}),
            make_field("c", "heading"),
        ]
    )
    v = generate(tpl)
    assert v.field_ids == ["a", "b"]
    assert v.validate({}) == ({}, {})


def test_subset_models_are_bounded():
    from form_engine import schema_generator

    fields = [make_field(f"q{i}") for i in range(8)]
    v = generate(make_template(fields))
    ids = [f["id"] for f in fields]
    for i in range(len(ids)):
        for j in range(i + 1, len(ids) + 1):
            assert v.validate({}, only=ids[i:j]) == ({}, {})
    assert len(v._models) == schema_generator._MAX_SUBSET_MODELS
