"""Tests for recursive dup, merge, sort and fetch."""

import pytest as _pytest

import viralmap.capabilities as capabilities
import viralmap.core as core
import viralmap.uber as uber


class TestDup:
    """Tests for recursive_dup()."""

    def test_copies_every_level(self) -> None:
        """Nested mappings and lists are new objects."""
        data = uber.UberDict({"a": {"b": [1, {"c": 2}]}})
        double = data.recursive_dup()

        assert double == data
        assert type(double) is uber.UberDict
        assert double["a"] is not data["a"]
        assert double["a.b"] is not data["a.b"]
        double["a.b.1.c"] = 3
        assert data["a.b.1.c"] == 2

    def test_keeps_instance_state(self) -> None:
        """Capabilities, separator and location carry over."""
        data = core.decorate({"a": {"b": 1}}, capabilities.PathedAccess(), capabilities.RecursiveDup(), separator="/")
        double = data["a"].recursive_dup()
        assert double.has_capability(capabilities.PathedAccess)
        assert double.separator == "/"
        assert double.path_prefix == "/a"

    def test_plain_values(self) -> None:
        """Plain dicts are copied as plain dicts."""
        source = {"a": [1, {"b": 2}]}
        double = capabilities.recursive_dup(source)
        assert double == source
        assert double["a"] is not source["a"]
        assert type(double) is dict

    def test_deep_dup_alias(self) -> None:
        """deep_dup is the same operation."""
        assert capabilities.deep_dup is capabilities.recursive_dup


class TestMerge:
    """Tests for recursive_update() and recursive_merge()."""

    def test_mappings_merge_and_lists_concatenate(self) -> None:
        """Nested mappings merge key by key; lists are joined."""
        data = uber.UberDict({"a": {"b": 1}, "list": [1]})
        data.recursive_update({"a": {"c": 2}, "list": [2]})
        assert data == {"a": {"b": 1, "c": 2}, "list": [1, 2]}

    def test_overwrite_controls_scalars(self) -> None:
        """Existing scalars are replaced only with overwrite."""
        data = uber.UberDict({"a": 1, "b": {"c": 1}})
        data.recursive_update({"a": 2, "b": {"c": 2, "d": 3}}, overwrite=False)
        assert data == {"a": 1, "b": {"c": 1, "d": 3}}
        data.recursive_update({"a": 2})
        assert data["a"] == 2

    def test_none_keeps_other_side(self) -> None:
        """None on either side keeps the value from the other."""
        data = uber.UberDict({"a": None, "b": 1})
        data.recursive_update({"a": 1, "b": None})
        assert data == {"a": 1, "b": 1}
        assert data.recursive_update(None) is data

    def test_merge_leaves_original(self) -> None:
        """recursive_merge() works on a duplicate."""
        data = uber.UberDict({"a": {"b": 1}})
        merged = data.recursive_merge({"a": {"c": 2}})
        assert merged == {"a": {"b": 1, "c": 2}}
        assert data == {"a": {"b": 1}}

    def test_merged_values_are_copies(self) -> None:
        """Incoming nested values are not shared with the source."""
        incoming = {"a": {"b": [1]}}
        data = uber.UberDict()
        data.recursive_update(incoming)
        data["a.b"].append(2)
        assert incoming == {"a": {"b": [1]}}

    def test_keys_are_not_paths(self) -> None:
        """Dotted keys of the incoming mapping stay single keys."""
        data = uber.UberDict()
        data.recursive_update({"a.b": 1})
        assert list(data.keys()) == ["a.b"]

    def test_equivalent_keys_merge(self) -> None:
        """Indifferent containers merge equivalent keys into one entry."""
        data = uber.UberDict({"1": "a"})
        data.recursive_update({1: "b"})
        assert data == {"1": "b"}

    def test_type_mismatch_raises(self) -> None:
        """A mapping can't absorb a list."""
        with _pytest.raises(TypeError):
            uber.UberDict().recursive_update([1])

    def test_sequence_update(self) -> None:
        """Sequence containers extend."""
        data = core.decorate([1], capabilities.RecursiveMerge())
        data.recursive_update([{"a": 1}])
        assert data == [1, {"a": 1}]
        assert isinstance(data[1], core.ViralDict)


class TestSort:
    """Tests for recursive_sort() and recursive_sorted()."""

    def test_sorts_every_level(self) -> None:
        """Keys are ordered in nested mappings and mappings inside lists."""
        data = uber.UberDict({"b": 1, "a": {"d": 1, "c": 2}, "l": [{"z": 1, "y": 2}, 3]})
        data.recursive_sort()
        assert list(data.keys()) == ["a", "b", "l"]
        assert list(data["a"].keys()) == ["c", "d"]
        assert list(data["l"][0].keys()) == ["y", "z"]
        assert data["l"][1] == 3

    def test_reverse_and_key(self) -> None:
        """Sort order can be customised."""
        data = uber.UberDict({"a": 1, "B": 2, "c": 3})
        data.recursive_sort(key=str.lower, reverse=True)
        assert list(data.keys()) == ["c", "B", "a"]

    def test_sorted_is_a_copy(self) -> None:
        """recursive_sorted() leaves the original order alone."""
        data = uber.UberDict({"b": 1, "a": 2})
        ordered = data.recursive_sorted()
        assert list(ordered.keys()) == ["a", "b"]
        assert list(data.keys()) == ["b", "a"]

    def test_sorted_children_keep_capabilities(self) -> None:
        """Sorting doesn't strip nested containers."""
        data = uber.UberDict({"b": {"y": 1}, "a": 1})
        data.recursive_sort()
        assert data["b.y"] == 1
        assert type(data["b"]) is uber.UberDict


class TestFetch:
    """Tests for recursive_fetch_one() and recursive_fetch_all()."""

    @_pytest.fixture
    def tree(self) -> uber.UberDict:
        return uber.UberDict(
            {
                "password": None,
                "db": {"password": "x", "replica": {"password": "z"}},
                "users": [{"password": "y"}],
            }
        )

    def test_fetch_one_depth_first(self, tree: uber.UberDict) -> None:
        """The first non-None match wins, searching depth-first."""
        assert tree.recursive_fetch_one("password") == "x"

    def test_fetch_all(self, tree: uber.UberDict) -> None:
        """Every match is collected, lists included."""
        assert tree.recursive_fetch_all("password") == ["x", "z", "y"]
        assert tree.recursive_fetch("password") == ["x", "z", "y"]

    def test_default(self, tree: uber.UberDict) -> None:
        """Misses give the default."""
        assert tree.recursive_fetch_one("missing", 5) == 5
        assert tree.recursive_fetch_all("missing") is None

    def test_callback(self, tree: uber.UberDict) -> None:
        """The callback sees the parent and replaces the result."""
        parents = []

        def callback(parent: object, value: str, default: object) -> str:
            parents.append(parent)
            return value.upper()

        assert tree.recursive_fetch_one("password", callback=callback) == "X"
        assert parents == [tree["db"]]

    def test_fetch_path(self, tree: uber.UberDict) -> None:
        """Keys may be paths relative to every level."""
        assert tree.recursive_fetch_all("replica.password") == ["z"]
