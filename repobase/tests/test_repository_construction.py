import pytest

from repobase import (
    DuplicateProperties,
    EmptyRequirements,
    InvalidValue,
    RepositoryError,
    UnknownProperty,
    UnknownSetter,
)
from sample_repositories import (
    Account,
    BadCustomDefault,
    BadRequired,
    CamelEvent,
    Clash,
    Dated,
    Event,
    Foo,
    LenientClash,
    LenientUntyped,
    Ordered,
    Person,
    Untyped,
)


def test_setter_and_getter_hooks_with_custom_default():
    foo = Foo({"bar": "apple"})

    assert foo.get("bar") == "Apple"
    assert foo.get("bing") == 1000000
    with pytest.raises(UnknownProperty):
        foo.get("baz")


def test_missing_required_field_fails_construction():
    with pytest.raises(EmptyRequirements) as exc:
        Foo({})

    assert exc.value.missing == ("bar",)
    assert str(exc.value) == "Please be sure to provide values for the following property:  bar"


def test_empty_requirements_lists_every_missing_field():
    with pytest.raises(EmptyRequirements) as exc:
        Person({"nickname": "ace"})

    assert exc.value.missing == ("first", "last")
    assert "following properties:  first, last" in str(exc.value)


def test_required_field_names_capability_and_hidden_required_field():
    with pytest.raises(EmptyRequirements) as exc:
        Account({"email": "a@example.com"})
    assert exc.value.missing == ("password_hash",)

    account = Account({"email": "a@example.com", "password_hash": "x"})
    assert account.to_dict() == {"email": "a@example.com", "plan": "free"}


def test_kebab_case_keys_map_to_snake_case_fields():
    event = Event({"start-date": "2020-01-01"})
    assert event.get("start_date") == "2020-01-01"


def test_kebab_case_keys_map_to_camel_case_fields():
    event = CamelEvent({"start-date": "2020-01-01"})
    assert event.get("startDate") == "2020-01-01"


def test_unknown_key_names_the_offending_key():
    with pytest.raises(UnknownProperty) as exc:
        Event({"start-date": "2020-01-01", "end-date": "2020-01-02"})

    assert exc.value.property_name == "end-date"
    assert "end-date" in str(exc.value)


def test_missing_setter_is_fatal_in_strict_mode():
    with pytest.raises(UnknownSetter) as exc:
        Untyped({"title": "x"})

    assert exc.value.setter == "set_title"


def test_missing_setter_falls_back_to_direct_assignment_when_lenient():
    assert LenientUntyped({"title": "x"}).get("title") == "x"


def test_setter_errors_propagate_unchanged():
    with pytest.raises(InvalidValue):
        Dated({"day": "yesterday"})

    assert Dated({"day": "2024-02-29"}).day == "2024-02-29"


def test_invalid_value_is_a_value_error():
    with pytest.raises(ValueError):
        Dated({"day": "nope"})


def test_duplicate_optional_and_required_fields_rejected():
    with pytest.raises(DuplicateProperties) as exc:
        Clash({})

    assert exc.value.names == ("bar",)


def test_duplicate_check_can_be_disabled():
    clash = LenientClash({"bar": "plain", "__bar": "required"})

    assert clash.to_dict() == {"bar": "plain", "__bar": "required"}

    with pytest.raises(EmptyRequirements) as exc:
        LenientClash({"bar": "plain"})
    assert exc.value.missing == ("bar",)


def test_setters_fire_in_input_order():
    assert Ordered({"second": "b", "first": "a"})._order == ["second", "first"]


def test_non_mapping_input_is_rejected():
    with pytest.raises(InvalidValue):
        Event([("start_date", "2020-01-01")])  # type: ignore[arg-type]


def test_none_input_means_empty_mapping():
    assert Event(None).to_dict() == {"start_date": None}


def test_unknown_names_in_capabilities_fail_construction():
    with pytest.raises(UnknownProperty):
        BadCustomDefault({})
    with pytest.raises(UnknownProperty):
        BadRequired({"name": "x"})


def test_all_construction_errors_share_a_base_class():
    for data in ({}, {"bar": "x", "nope": 1}):
        with pytest.raises(RepositoryError):
            Foo(data)
