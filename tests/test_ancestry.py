# tests/test_ancestry.py
"""
Structural inspection tests

Covers the three capability questions (container, mapping, error type),
diamond hierarchies, and foreign objects whose __bases__ form a cycle.
"""
from collections import OrderedDict, deque

from core.validation import (
    Capability,
    ancestry_includes,
    compute_ancestry,
    is_container,
    is_error_type,
    is_mapping,
    type_includes,
)


class Base:
    pass


class Left(Base):
    pass


class Right(Base):
    pass


class Diamond(Left, Right):
    pass


class DiamondError(Left, ValueError):
    pass


class FakeNode:
    """Object that pretends to be a class by carrying __bases__."""

    def __init__(self, name):
        self.name = name
        self.__bases__ = ()


class DuckBag:
    """Collection by protocol only, never subclassing one."""

    def __len__(self):
        return 0

    def __iter__(self):
        return iter(())

    def __contains__(self, item):
        return False


class TestComputeAncestry:
    def test_diamond_visits_shared_base_once(self):
        ancestry = compute_ancestry(Diamond)
        assert ancestry == {Diamond, Left, Right, Base, object}
        assert len(ancestry) == 5

    def test_cyclic_bases_terminate(self):
        a, b, c = FakeNode("a"), FakeNode("b"), FakeNode("c")
        a.__bases__ = (b,)
        b.__bases__ = (c,)
        c.__bases__ = (a, b)

        ancestry = compute_ancestry(a)

        assert ancestry == {a, b, c}

    def test_self_referencing_node(self):
        node = FakeNode("self")
        node.__bases__ = (node,)
        assert compute_ancestry(node) == {node}

    def test_is_deterministic(self):
        assert compute_ancestry(Diamond) == compute_ancestry(Diamond)


class TestCapabilities:
    def test_containers(self):
        for value in ([], (), set(), frozenset(), deque(), "text", DuckBag()):
            assert is_container(value), value

    def test_non_containers(self):
        for value in (0, 1.5, None, object(), Diamond()):
            assert not is_container(value), value

    def test_mappings(self):
        assert is_mapping({})
        assert is_mapping(OrderedDict())
        assert not is_mapping([])
        assert not is_mapping("text")

    def test_error_capability_through_diamond(self):
        assert type_includes(DiamondError, Capability.ERROR)
        assert not type_includes(Diamond, Capability.ERROR)

    def test_cyclic_fake_hierarchy_has_no_capability(self):
        a, b = FakeNode("a"), FakeNode("b")
        a.__bases__ = (b,)
        b.__bases__ = (a,)
        for capability in Capability:
            assert not type_includes(a, capability)

    def test_ancestry_includes_uses_concrete_type(self):
        assert ancestry_includes(ValueError("boom"), Capability.ERROR)
        assert not ancestry_includes(ValueError, Capability.ERROR)  # type(ValueError) is type


class TestIsErrorType:
    def test_exception_classes(self):
        assert is_error_type(ValueError)
        assert is_error_type(DiamondError)

    def test_rejects_instances_and_plain_classes(self):
        assert not is_error_type(ValueError("boom"))
        assert not is_error_type(int)
        assert not is_error_type(Diamond)
        assert not is_error_type("builtins.ValueError")

    def test_base_exception_outside_exception_is_rejected(self):
        assert not is_error_type(KeyboardInterrupt)
