# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Tests for Collection.update reconciliation."""

import pytest

from pinnable import Collection, Model


class User(Model):
    name: str = ""


@pytest.fixture
def users():
    return [User({"name": n}) for n in "abcde"]


def names(collection):
    return [u.name for u in collection]


class TestUpdate:
    def test_matches_target_order_and_content(self, users):
        a, b, c, d, e = users
        collection = Collection([a, b, c])
        collection.update(Collection([d, c, a, e]))
        assert collection.items == [d, c, a, e]

    def test_accepts_plain_sequences(self, users):
        a, b, c, *_ = users
        collection = Collection([a, b])
        collection.update([c, b])
        assert collection.items == [c, b]

    def test_is_idempotent(self, users, recorder):
        a, b, c, d, _ = users
        collection = Collection([a, b, c])
        target = Collection([c, d, a])
        collection.update(target)
        after_first = collection.items
        recorder.listen(collection, "insert", "remove", "move")
        collection.update(target)
        assert collection.items == after_first
        assert recorder.calls == []

    def test_phase_order(self, users, recorder):
        a, b, c, d, _ = users
        collection = Collection([a, b, c])
        recorder.listen(collection, "insert", "remove", "move")
        collection.update([d, c, a])
        assert recorder.calls == [
            ("remove", (1, b)),
            ("insert", (d, 2)),
            ("move", (2, 0)),
            ("move", (2, 1)),
        ]

    def test_removes_back_to_front(self, users, recorder):
        a, b, c, d, _ = users
        collection = Collection([a, b, c, d])
        recorder.listen(collection, "remove")
        collection.update([b, d])
        assert recorder.named("remove") == [(2, c), (0, a)]

    def test_empty_target_clears(self, users):
        collection = Collection(users)
        collection.update([])
        assert collection.length == 0

    def test_identity_not_equality(self):
        original = User({"name": "same"})
        twin = User({"name": "same"})
        collection = Collection([original])
        collection.update([twin])
        assert collection.items == [twin]

    def test_duplicates_respect_multiplicity(self, users):
        a, b, *_ = users
        collection = Collection([a, a, b])
        collection.update([b, a])
        assert collection.items == [b, a]
        collection.update([a, b, a])
        assert collection.items == [a, b, a]

    def test_raw_values_are_coerced_and_ordered(self, users):
        a, *_ = users
        collection = Collection([a], User)
        collection.update([{"name": "x"}, a])
        assert names(collection) == ["x", "a"]
        assert isinstance(collection.at(0), User)

    def test_is_undoable(self, users):
        a, b, c, d, e = users
        collection = Collection([a, b, c])
        collection.update([e, c, d])
        assert collection.dirty
        collection.reset()
        assert collection.items == [a, b, c]
        assert not collection.dirty

    def test_reordering_only_is_clean(self, users):
        a, b, c, *_ = users
        collection = Collection([a, b, c])
        collection.update([c, a, b])
        assert collection.items == [c, a, b]
        assert not collection.dirty

    def test_collection_members_are_not_flattened(self, users):
        a, b, *_ = users
        inner = Collection([b])
        outer = Collection([a])
        outer.update([inner, a])
        assert outer.items == [inner, a]
        assert inner.items == [b]
