# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Tests for Model (pinnable/protocols/generic/element.py)."""

import pydantic
import pytest

from pinnable.protocols._concepts import ModelLike, is_model_like
from pinnable.protocols.generic.element import Model


class User(Model):
    name: str = ""
    tags: list[str] = []


@pytest.fixture
def user():
    return User({"name": "Hans"})


def test_positional_mapping(user):
    assert user.name == "Hans"
    assert not user.dirty


def test_keyword_construction_overrides_mapping():
    assert User({"name": "a"}, name="b").name == "b"


def test_rejects_non_mapping():
    with pytest.raises(TypeError):
        User("Hans")


def test_extra_fields_forbidden():
    with pytest.raises(pydantic.ValidationError):
        User({"name": "x", "age": 3})


def test_model_validate_sets_baseline():
    user = User.model_validate({"name": "Hans"})
    assert not user.dirty
    user.name = "Jens"
    assert user.changes() == {"name": ("Hans", "Jens")}


def test_satisfies_model_capability(user):
    assert isinstance(user, ModelLike)
    assert is_model_like(user)
    assert not is_model_like({"name": "Hans"})


def test_to_json(user):
    assert user.to_json() == {"name": "Hans", "tags": []}


class TestChangeEvents:
    def test_assignment_emits_change(self, user, recorder):
        recorder.listen(user, "change")
        user.name = "Jens"
        assert recorder.named("change") == [
            ("name", "Jens", "Hans"),
            ("dirty", True, False),
        ]

    def test_same_value_emits_nothing(self, user, recorder):
        recorder.listen(user, "change")
        user.name = "Hans"
        assert recorder.calls == []

    def test_dirty_transition_is_edge_triggered(self, user, recorder):
        recorder.listen(user, "change dirty")
        user.name = "a"
        user.name = "b"
        user.name = "Hans"
        assert recorder.named("change dirty") == [(True, False), (False, True)]
        assert not user.dirty

    def test_assignment_is_validated(self, user):
        with pytest.raises(pydantic.ValidationError):
            user.name = ["not", "a", "string"]
        assert user.name == "Hans"
        assert not user.dirty

    def test_destroy_event(self, user, recorder):
        recorder.listen(user, "destroy")
        user.destroy()
        assert recorder.names == ["destroy"]


class TestBaseline:
    def test_reset_restores_baseline(self, user, recorder):
        user.name = "Jens"
        user.tags = ["x"]
        recorder.listen(user, "change dirty")
        user.reset()
        assert user.name == "Hans"
        assert user.tags == []
        assert not user.dirty
        assert recorder.named("change dirty") == [(False, True)]

    def test_reset_dirty_moves_baseline(self, user, recorder):
        user.name = "Jens"
        recorder.listen(user, "change")
        user.reset_dirty()
        assert not user.dirty
        assert recorder.named("change") == [("dirty", False, True)]
        user.reset()
        assert user.name == "Jens"

    def test_reset_dirty_when_clean_is_silent(self, user, recorder):
        recorder.listen(user, "change")
        user.reset_dirty()
        assert recorder.calls == []

    def test_baseline_is_a_copy(self):
        user = User({"tags": ["a"]})
        user.tags = ["a", "b"]
        user.reset()
        assert user.tags == ["a"]
