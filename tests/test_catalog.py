"""Tests for ConstraintCatalog."""

import pytest

from paramvalidation.core.types import ParameterDataType
from paramvalidation.errors import (
    ConstraintDefinitionError,
    ConstraintNotSupportedError,
    InvalidArgumentError,
    UnknownConstraintError,
)
from paramvalidation.validation.catalog import ConstraintCatalog
from paramvalidation.validation.constraints import (
    ConstraintNames,
    EncryptedConstraint,
    EnumTypeConstraint,
    MinimumValueConstraint,
    NullConstraint,
    PasswordConstraint,
    TypeConstraint,
)

ALL_TYPES = [t for t in ParameterDataType if t != ParameterDataType.NONE]


@pytest.fixture
def catalog():
    return ConstraintCatalog()


class TestBuiltins:
    def test_all_well_known_names_registered(self, catalog):
        assert catalog.names() == sorted(
            value for key, value in vars(ConstraintNames).items() if key.isupper()
        )
        assert len(catalog.names()) == 24

    @pytest.mark.parametrize("name", ["Null", "Encrypted", "ReadOnly", "DisplayHint", "Database"])
    @pytest.mark.parametrize("data_type", ALL_TYPES)
    def test_markers_apply_to_every_type(self, catalog, name, data_type):
        assert catalog.create(name, data_type).name == name

    def test_creates_new_instances(self, catalog):
        first = catalog.create("Null", ParameterDataType.STRING)
        second = catalog.create("Null", ParameterDataType.STRING)
        assert isinstance(first, NullConstraint)
        assert first is not second

    def test_range_constraint_gets_data_type(self, catalog):
        constraint = catalog.create("MinValue", ParameterDataType.INT16)
        assert isinstance(constraint, MinimumValueConstraint)
        assert constraint.data_type == ParameterDataType.INT16

    def test_type_constraint_depends_on_data_type(self, catalog):
        assert isinstance(catalog.create("Type", ParameterDataType.ENUM), EnumTypeConstraint)
        xml_type = catalog.create("Type", ParameterDataType.XML)
        assert isinstance(xml_type, TypeConstraint)
        assert not isinstance(xml_type, EnumTypeConstraint)

    @pytest.mark.parametrize(
        "name, data_type",
        [
            ("MinValue", ParameterDataType.STRING),
            ("MaxValue", ParameterDataType.BOOL),
            ("Step", ParameterDataType.TIME_SPAN),
            ("Length", ParameterDataType.URI),
            ("Regex", ParameterDataType.INT32),
            ("AllowedScheme", ParameterDataType.STRING),
            ("Values", ParameterDataType.INT32),
            ("Type", ParameterDataType.STRING),
            ("DecimalPlaces", ParameterDataType.INT32),
        ],
    )
    def test_not_supported(self, catalog, name, data_type):
        with pytest.raises(ConstraintNotSupportedError) as exc_info:
            catalog.create(name, data_type)
        assert isinstance(exc_info.value, ConstraintDefinitionError)
        assert exc_info.value.constraint_name == name

    def test_unknown(self, catalog):
        with pytest.raises(UnknownConstraintError) as exc_info:
            catalog.create("Bogus", ParameterDataType.STRING)
        assert exc_info.value.constraint_name == "Bogus"
        assert exc_info.value.position is None

    def test_none_data_type(self, catalog):
        with pytest.raises(InvalidArgumentError):
            catalog.create("Null", ParameterDataType.NONE)

    def test_introspection(self, catalog):
        assert catalog.is_known("MaxLength")
        assert not catalog.is_known("Bogus")
        entry = catalog.entry("MaxLength")
        assert entry.applies_to(ParameterDataType.URI)
        assert not entry.applies_to(ParameterDataType.INT32)
        assert catalog.entry("Bogus") is None


class TestRegistration:
    def test_empty_catalog(self):
        assert ConstraintCatalog(register_builtins=False).names() == []

    def test_register_replaces_entry(self, catalog):
        catalog.register("Null", lambda _: EncryptedConstraint())
        assert isinstance(catalog.create("Null", ParameterDataType.STRING), EncryptedConstraint)

    def test_register_with_data_types(self, catalog):
        catalog.register("Secret", lambda _: PasswordConstraint(), [ParameterDataType.STRING])
        assert isinstance(catalog.create("Secret", ParameterDataType.STRING), PasswordConstraint)
        with pytest.raises(ConstraintNotSupportedError):
            catalog.create("Secret", ParameterDataType.INT32)

    @pytest.mark.parametrize("name", ["", "  "])
    def test_register_requires_name(self, catalog, name):
        with pytest.raises(InvalidArgumentError):
            catalog.register(name, lambda _: NullConstraint())

    def test_register_rejects_none_type(self, catalog):
        with pytest.raises(InvalidArgumentError):
            catalog.register("X", lambda _: NullConstraint(), [ParameterDataType.NONE])


class TestResolvers:
    def test_resolver_for_unknown_name(self, catalog):
        seen = []

        def resolver(name, data_type):
            seen.append((name, data_type))
            return EncryptedConstraint() if name == "Secret" else None

        catalog.add_resolver(resolver)
        assert isinstance(catalog.create("Secret", ParameterDataType.STRING), EncryptedConstraint)
        assert seen == [("Secret", ParameterDataType.STRING)]

    def test_catalog_entries_take_precedence(self, catalog):
        calls = []
        catalog.add_resolver(lambda name, data_type: calls.append(name))
        catalog.create("Null", ParameterDataType.STRING)
        assert calls == []

    def test_resolvers_run_in_registration_order(self, catalog):
        order = []

        def first(name, data_type):
            order.append("first")
            return None

        def second(name, data_type):
            order.append("second")
            return PasswordConstraint()

        def third(name, data_type):
            order.append("third")
            return EncryptedConstraint()

        for resolver in (first, second, third):
            catalog.add_resolver(resolver)

        assert isinstance(catalog.create("Custom", ParameterDataType.STRING), PasswordConstraint)
        assert order == ["first", "second"]

    def test_resolver_can_serve_inapplicable_name(self, catalog):
        catalog.add_resolver(
            lambda name, data_type: NullConstraint() if name == "MinValue" else None
        )
        assert isinstance(catalog.create("MinValue", ParameterDataType.STRING), NullConstraint)

    def test_unresolved_name_still_unknown(self, catalog):
        catalog.add_resolver(lambda name, data_type: None)
        with pytest.raises(UnknownConstraintError):
            catalog.create("Bogus", ParameterDataType.STRING)

    def test_remove_resolver(self, catalog):
        def resolver(name, data_type):
            return EncryptedConstraint()

        catalog.add_resolver(resolver)
        assert catalog.remove_resolver(resolver) is True
        assert catalog.remove_resolver(resolver) is False
        with pytest.raises(UnknownConstraintError):
            catalog.create("Anything", ParameterDataType.STRING)

    def test_resolver_must_be_callable(self, catalog):
        with pytest.raises(InvalidArgumentError):
            catalog.add_resolver("not callable")


class TestDefaultCatalog:
    def test_default_is_shared(self):
        assert ConstraintCatalog.default() is ConstraintCatalog.default()

    def test_instances_are_independent(self):
        catalog = ConstraintCatalog()
        catalog.register("OnlyHere", lambda _: NullConstraint())
        assert not ConstraintCatalog.default().is_known("OnlyHere")
