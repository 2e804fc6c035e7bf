import copy
import json

import pytest

from repobase import ReadOnlyProperty, RepositoryInterface, UnknownProperty, Visibility
from sample_repositories import CamelEvent, Event, Foo, Num, Secret, Settings


def test_hidden_fields_are_invisible_everywhere():
    foo = Foo({"bar": "apple", "baz": "secret"})

    assert foo.to_dict() == {"bar": "Apple", "bing": 1000000}
    assert "baz" not in json.loads(foo.to_json())
    assert [name for name, _ in foo] == ["bar", "bing"]
    assert not foo.has("baz")
    assert not hasattr(foo, "baz")
    with pytest.raises(UnknownProperty):
        foo.get("baz")

    # still set and usable internally
    assert foo._stored("baz") == "secret"


def test_hidden_fields_still_take_defaults():
    assert Foo({"bar": "apple"})._stored("baz") == "hidden value"


def test_attribute_access_goes_through_getter_hooks():
    foo = Foo({"bar": "apple"})

    assert foo.bar == "Apple"
    assert foo.bing == 1000000
    with pytest.raises(AttributeError):
        foo.baz


def test_has_and_contains():
    foo = Foo({"bar": "apple"})

    assert foo.has("bar")
    assert foo.has("__bar")
    assert "bing" in foo
    assert "baz" not in foo
    assert "nope" not in foo
    assert 42 not in foo


def test_to_dict_is_idempotent_and_matches_json():
    foo = Foo({"bar": "apple"})

    first = foo.to_dict()
    second = foo.to_dict()

    assert first == second
    assert list(first) == ["bar", "bing"]
    assert json.loads(foo.to_json()) == first


def test_iteration_is_restartable():
    foo = Foo({"bar": "apple"})

    it = iter(foo)
    assert next(it) == ("bar", "Apple")

    assert list(foo) == [("bar", "Apple"), ("bing", 1000000)]
    assert list(foo) == list(foo)
    assert dict(foo) == foo.to_dict()
    assert len(foo) == 2


def test_fields_cannot_be_mutated_after_construction():
    foo = Foo({"bar": "apple"})

    with pytest.raises(ReadOnlyProperty):
        foo.bar = "pear"
    with pytest.raises(ReadOnlyProperty):
        foo.anything = 1
    with pytest.raises(ReadOnlyProperty):
        del foo.bar
    with pytest.raises(ReadOnlyProperty):
        foo._store("bar", "pear")

    assert foo.get("bar") == "Apple"


def test_equality_hash_and_fingerprint_follow_content():
    a = Foo({"bar": "apple"})
    b = Foo({"bar": "apple", "baz": "other hidden value"})
    c = Foo({"bar": "pear"})

    assert a == b
    assert hash(a) == hash(b)
    assert a.fingerprint() == b.fingerprint()
    assert a != c
    assert a.fingerprint() != c.fingerprint()
    assert len(a.fingerprint()) == 64


def test_to_fields_round_trips_through_constructor():
    event = Event({"start-date": "2020-01-01"})
    assert event.to_fields() == {"start-date": "2020-01-01"}
    assert Event(event.to_fields()) == event

    camel = CamelEvent({"start-date": "2020-01-01"})
    assert camel.to_fields() == {"start-date": "2020-01-01"}


def test_describe_reports_field_facts():
    foo = Foo({"bar": "apple"})
    facts = {d.name: d for d in foo.describe()}

    assert list(facts) == ["bar", "baz", "bing"]
    assert facts["bar"].required
    assert facts["bar"].has_setter_hook
    assert facts["bar"].has_getter_hook
    assert facts["baz"].visibility == Visibility.HIDDEN
    assert facts["baz"].has_default
    assert facts["bing"].has_custom_default
    assert not facts["bing"].has_getter_hook
    assert facts["bing"].to_dict()["visibility"] == "exposed"


def test_repositories_satisfy_the_interface():
    assert isinstance(Foo({"bar": "apple"}), RepositoryInterface)


def test_repr_shows_exposed_fields_only():
    assert repr(Foo({"bar": "apple"})) == "Foo(bar='Apple', bing=1000000)"


def test_read_path_returns_copies_of_mutable_values():
    settings = Settings({"tags": ["x"]})

    settings.get("tags").append("from-get")
    settings.tags.append("from-attribute")
    settings.to_dict()["tags"].append("from-to-dict")
    for name, value in settings:
        if name == "tags":
            value.clear()
            value.append("from-iteration")

    assert settings.get("tags") == ["x"]
    assert settings.to_dict() == settings.to_dict()


def test_equal_repositories_hash_equal():
    assert Num({"n": 1}) != Num({"n": 1.0})
    assert len({Num({"n": 1}), Num({"n": 1.0})}) == 2

    a = Num({"n": [1, 2]})
    b = Num({"n": [1, 2]})
    assert a == b
    assert hash(a) == hash(b)


def test_hidden_fields_are_not_reachable_through_private_names():
    secret = Secret({"token": "s3cr3t", "label": "api"})

    with pytest.raises(AttributeError):
        getattr(secret, "_Secret__token")
    with pytest.raises(AttributeError):
        getattr(secret, "__token")
    assert not secret.has("token")
    assert secret.to_dict() == {"label": "api"}
    assert secret._stored("token") == "s3cr3t"


def test_copying_a_repository_keeps_the_instance():
    foo = Foo({"bar": "apple"})

    assert copy.copy(foo) is foo
    assert copy.deepcopy({"child": foo})["child"] is foo
