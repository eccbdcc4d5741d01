"""Tests for the Prefix Registry."""

import threading

import pytest

from canonid.core.errors import (
    DuplicatePrefixRegistrationError,
    InvalidFormatError,
    InvalidPrefixForTypeError,
    PrefixReassignmentError,
    UnknownPrefixError,
    UnsetPrefixError,
)
from canonid.core.prefix_registry import (
    PrefixRegistry,
    TypeDescriptor,
    get_registry,
    init_registry,
    reset_registry,
)
from canonid.core.stores import InMemoryStore


class TestRegister:
    def test_distinct_prefixes_succeed(self):
        registry = PrefixRegistry()
        registry.register("a", TypeDescriptor("TypeA", store=InMemoryStore()))
        registry.register("u", TypeDescriptor("TypeB", store=InMemoryStore()))
        assert len(registry) == 2
        assert registry.lookup("a").name == "TypeA"
        assert registry.lookup("u").name == "TypeB"

    def test_duplicate_prefix_raises(self):
        registry = PrefixRegistry()
        registry.register("a", TypeDescriptor("TypeA", store=InMemoryStore()))
        with pytest.raises(DuplicatePrefixRegistrationError) as exc:
            registry.register("a", TypeDescriptor("TypeB", store=InMemoryStore()))
        assert exc.value.existing_type == "TypeA"
        assert exc.value.new_type == "TypeB"
        assert registry.lookup("a").name == "TypeA"

    def test_same_descriptor_twice_raises(self):
        registry = PrefixRegistry()
        type_a = TypeDescriptor("TypeA", store=InMemoryStore())
        registry.register("a", type_a)
        with pytest.raises(DuplicatePrefixRegistrationError):
            registry.register("a", type_a)

    def test_duplicate_detection_ignores_case(self):
        registry = PrefixRegistry()
        registry.register("a", TypeDescriptor("TypeA", store=InMemoryStore()))
        with pytest.raises(DuplicatePrefixRegistrationError):
            registry.register("A", TypeDescriptor("TypeB", store=InMemoryStore()))

    @pytest.mark.parametrize("prefix", ["", "a-b", "a b", "é!"])
    def test_invalid_prefix_raises(self, prefix):
        registry = PrefixRegistry()
        with pytest.raises(InvalidFormatError):
            registry.register(prefix, TypeDescriptor("TypeA", store=InMemoryStore()))

    def test_sets_descriptor_prefix(self):
        registry = PrefixRegistry()
        type_a = TypeDescriptor("TypeA", store=InMemoryStore())
        registry.register("a", type_a)
        assert type_a.prefix == "a"

    def test_same_descriptor_other_case_is_duplicate(self):
        registry = PrefixRegistry()
        type_a = TypeDescriptor("TypeA", store=InMemoryStore())
        registry.register("a", type_a)
        with pytest.raises(DuplicatePrefixRegistrationError):
            registry.register("A", type_a)

    def test_second_prefix_for_type_raises(self):
        registry = PrefixRegistry()
        type_a = TypeDescriptor("TypeA", store=InMemoryStore())
        registry.register("a", type_a)
        with pytest.raises(PrefixReassignmentError) as exc:
            registry.register("b", type_a)
        assert exc.value.current_prefix == "a"
        assert exc.value.new_prefix == "b"
        assert "b" not in registry
        assert type_a.prefix == "a"

    def test_without_backing_store_raises(self):
        registry = PrefixRegistry()
        with pytest.raises(ValueError, match="no backing store"):
            registry.register("a", TypeDescriptor("TypeA"))
        assert "a" not in registry

    def test_inherited_backing_store_accepted(self):
        registry = PrefixRegistry()
        base = TypeDescriptor("Base", store=InMemoryStore())
        registry.register("sub", TypeDescriptor("Sub", parent=base))
        assert registry.lookup("sub").backing_store is base.store

    def test_concurrent_registration_admits_one(self):
        registry = PrefixRegistry()
        errors = []

        def worker(i):
            try:
                registry.register("shared", TypeDescriptor(f"Type{i}", store=InMemoryStore()))
            except DuplicatePrefixRegistrationError as e:
                errors.append(e)

        threads = [threading.Thread(target=worker, args=(i,)) for i in range(20)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(registry) == 1
        assert len(errors) == 19


class TestLookup:
    def test_case_insensitive(self, registry):
        assert registry.lookup("A").name == "Account"

    def test_registered_form_preserved(self):
        registry = PrefixRegistry()
        registry.register("Acc", TypeDescriptor("Account", store=InMemoryStore()))
        assert registry.entry("acc").prefix == "Acc"

    def test_unknown_prefix_raises(self, registry):
        with pytest.raises(UnknownPrefixError) as exc:
            registry.lookup("x")
        assert exc.value.prefix == "x"

    def test_contains(self, registry):
        assert "a" in registry
        assert "U" in registry
        assert "x" not in registry

    def test_prefixes_sorted(self, registry):
        assert [e.prefix for e in registry.prefixes()] == ["a", "u"]


class TestEffectivePrefix:
    def test_own_prefix(self, registry):
        assert registry.effective_prefix(registry.get_type("User")) == "u"

    def test_inherited_prefix(self):
        registry = PrefixRegistry()
        parent = TypeDescriptor("Parent", store=InMemoryStore())
        registry.register("a", parent)
        child = TypeDescriptor("Child", parent=parent)
        grandchild = TypeDescriptor("Grandchild", parent=child)
        assert registry.effective_prefix(child) == "a"
        assert registry.effective_prefix(grandchild) == "a"

    def test_unset_prefix_raises(self):
        registry = PrefixRegistry()
        orphan = TypeDescriptor("Orphan", parent=TypeDescriptor("Base"))
        with pytest.raises(UnsetPrefixError) as exc:
            registry.effective_prefix(orphan)
        assert exc.value.type_name == "Orphan"

    def test_parent_cycle_raises(self):
        registry = PrefixRegistry()
        first = TypeDescriptor("First")
        second = TypeDescriptor("Second", parent=first)
        first.parent = second
        with pytest.raises(UnsetPrefixError):
            registry.effective_prefix(first)


class TestDefineType:
    def test_declares_identity_column(self):
        registry = PrefixRegistry(code_length=10)
        store = InMemoryStore("Account")
        registry.define_type("Account", prefix="a", store=store)
        assert store.identity_column == {"size": 10, "unique": True, "fixed": True}

    def test_inherited_type_shares_store(self, registry):
        admin = registry.get_type("Admin")
        assert admin.prefix is None
        assert admin.backing_store is registry.get_type("User").backing_store
        assert registry.lookup("u").name == "User"

    def test_without_prefix_or_ancestor_prefix_raises(self):
        registry = PrefixRegistry()
        with pytest.raises(UnsetPrefixError):
            registry.define_type("Orphan", store=InMemoryStore())
        with pytest.raises(KeyError):
            registry.get_type("Orphan")

    def test_without_store_or_parent_raises(self):
        registry = PrefixRegistry()
        with pytest.raises(ValueError, match="no backing store"):
            registry.define_type("Account", prefix="a")
        assert "a" not in registry

    def test_duplicate_type_name_raises(self, registry):
        with pytest.raises(ValueError, match="already defined"):
            registry.define_type("Account", prefix="acc", store=InMemoryStore())

    def test_get_unknown_type_raises(self, registry):
        with pytest.raises(KeyError):
            registry.get_type("Ghost")


class TestTrimCode:
    def test_trims_own_prefix(self, registry):
        assert registry.trim_code(registry.get_type("Account"), "a-abcd1234") == "abcd1234"

    def test_trims_inherited_prefix(self, registry):
        assert registry.trim_code(registry.get_type("Admin"), "u-abcd1234") == "abcd1234"

    def test_wrong_prefix_raises(self, registry):
        with pytest.raises(InvalidPrefixForTypeError):
            registry.trim_code(registry.get_type("Account"), "u-abcd1234")

    def test_uses_precompiled_grammar(self, registry):
        grammar = registry.grammar("a")
        assert grammar is registry.entry("a").grammar
        assert registry.grammar_for_type(registry.get_type("Account")) is grammar


class TestDefaultRegistry:
    def teardown_method(self):
        reset_registry()

    def test_uninitialized_raises(self):
        reset_registry()
        with pytest.raises(RuntimeError, match="not initialized"):
            get_registry()

    def test_init_and_get(self):
        registry = init_registry()
        assert get_registry() is registry
        assert len(registry) == 0
