"""Tests for native to Python type mapping."""

import pytest

from objcgen.typemap import Mapped, Opaque, map_type, render_type


class TestMapType:
    """Test the mapping table."""

    @pytest.mark.parametrize(
        "native,expected",
        [
            ("void", "None"),
            ("BOOL", "bool"),
            ("NSInteger", "int"),
            ("unsigned long long", "int"),
            ("CGFloat", "float"),
            ("NSTimeInterval", "float"),
            ("NSString *", "str"),
            ("const char *", "str"),
            ("SEL", "str"),
            ("NSArray *", "list[Any]"),
            ("NSDictionary *", "dict[str, Any]"),
        ],
    )
    def test_scalars_and_collections(self, native, expected):
        """Scalars and collections map to Python types."""
        assert map_type(native) == Mapped(expected)

    def test_lightweight_generics(self):
        """Lightweight generics map to parameterized types."""
        assert map_type("NSArray<NSString *> *").render() == "list[str]"
        assert map_type("NSSet<NSNumber *> *").render() == "set[float]"
        assert map_type("NSDictionary<NSString *, NSArray<NSString *> *> *").render() == (
            "dict[str, list[str]]"
        )

    def test_block_types(self):
        """Block types map to Callable."""
        assert map_type("void (^)(BOOL finished)").render() == "Callable[..., Any]"

    @pytest.mark.parametrize("native", ["id", "instancetype", "Class", "NSObject *", "CGRect"])
    def test_opaque(self, native):
        """Object, class and struct types render as id."""
        target = map_type(native)
        assert isinstance(target, Opaque)
        assert target.render() == "id"

    def test_opaque_keeps_native_name(self):
        """Opaque types keep their native name."""
        assert map_type("NSView *") == Opaque("NSView")

    def test_unknown_generic_is_opaque(self):
        """Unknown generic types are opaque."""
        assert map_type("NSCache<NSString *, id> *") == Opaque("NSCache<NSString *, id>")


class TestRenderType:
    """Test nullability rendering."""

    def test_nullable_suffix(self):
        """Nullable types get a None suffix."""
        assert render_type("NSString", nullable=True) == "str | None"

    def test_nullable_opaque(self):
        """Nullable opaque types get a None suffix."""
        assert render_type("id", nullable=True) == "id | None"

    def test_none_suffix_added_once(self):
        """void stays None when marked nullable."""
        assert render_type("void", nullable=True) == "None"

    def test_non_nullable(self):
        """Non-nullable types have no suffix."""
        assert render_type("NSInteger") == "int"
