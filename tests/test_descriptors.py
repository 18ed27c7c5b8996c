"""Tests for edgerouter.routing.descriptors — docstring metadata extraction."""

import pytest

from edgerouter.errors import InvalidAttributeError
from edgerouter.routing.descriptors import (
    ParameterDescriptor,
    declared_parameters,
    describe_handler,
    extract,
    param,
)


async def get_user(name, verbose, request):
    """Fetch one user.

    @param where:path type:string name:name | The user name
    @param where:query type:boolean name:verbose optional deprecated | Include details
    @category users
    @deprecated
    """


def undocumented(a, b=1, *args, **kwargs):
    return a


class TestExtract:
    def test_descriptors_follow_declared_order(self) -> None:
        meta = describe_handler(get_user)
        assert meta.parameters == ("name", "verbose", "request")
        assert [d.name for d in meta.descriptors] == ["name", "verbose", "request"]

    def test_documented_fields(self) -> None:
        meta = describe_handler(get_user)
        verbose = meta.descriptor("verbose")
        assert verbose == ParameterDescriptor(
            name="verbose",
            location="query",
            type="boolean",
            optional=True,
            deprecated=True,
            description="Include details",
        )

    def test_undocumented_parameter_is_any(self) -> None:
        request = describe_handler(get_user).descriptor("request")
        assert request is not None
        assert request.type == "any"
        assert not request.documented

    def test_category_and_deprecated(self) -> None:
        meta = describe_handler(get_user)
        assert meta.category == "users"
        assert meta.deprecated is True

    def test_summary_is_first_text_line(self) -> None:
        assert describe_handler(get_user).summary == "Fetch one user."

    def test_defaults_without_docstring(self) -> None:
        meta = describe_handler(undocumented)
        assert meta.category == "default"
        assert meta.deprecated is False
        assert [d.type for d in meta.descriptors] == ["any", "any"]

    def test_documented_but_not_declared_is_listed(self) -> None:
        meta = extract("@param where:header type:string name:x-token", ("a",))
        assert [d.name for d in meta.descriptors] == ["a", "x-token"]

    def test_description_runs_to_end_of_line(self) -> None:
        meta = extract(
            "@param where:header type:string name:token | Ask admin@example.com\n@category auth",
            ("token",),
        )
        assert meta.descriptors[0].description == "Ask admin@example.com"
        assert meta.category == "auth"

    def test_tag_must_start_a_line(self) -> None:
        meta = extract("Mail ops@category for help.", ())
        assert meta.category == "default"

    def test_content_type(self) -> None:
        meta = extract("@param where:body type:object name:data contentType:application/json", ())
        assert meta.descriptors[0].content_type == "application/json"


class TestExtractErrors:
    def test_unknown_named_attribute(self) -> None:
        with pytest.raises(InvalidAttributeError, match="color:red"):
            extract("@param where:query type:string name:a color:red", ("a",))

    def test_unknown_flag(self) -> None:
        with pytest.raises(InvalidAttributeError, match="'required'"):
            extract("@param where:query type:string name:a required", ("a",))

    def test_repeated_flag(self) -> None:
        with pytest.raises(InvalidAttributeError):
            extract("@param where:query type:string name:a optional optional", ("a",))

    def test_missing_attribute(self) -> None:
        with pytest.raises(InvalidAttributeError, match="Missing name, type, or where"):
            extract("@param where:query name:a", ("a",))

    def test_invalid_location(self) -> None:
        with pytest.raises(InvalidAttributeError, match="Invalid where: form"):
            extract("@param where:form type:string name:a", ("a",))

    def test_invalid_type(self) -> None:
        with pytest.raises(InvalidAttributeError, match="Invalid type: integer"):
            extract("@param where:query type:integer name:a", ("a",))

    def test_optional_path_parameter(self) -> None:
        with pytest.raises(InvalidAttributeError, match="cannot be optional"):
            extract("@param where:path type:string name:a optional", ("a",))


class TestExplicitDescriptors:
    def test_param_builder(self) -> None:
        d = param("age", "query", "number", optional=True)
        assert d.location == "query"
        assert d.type == "number"
        assert d.optional

    def test_param_builder_validates(self) -> None:
        with pytest.raises(InvalidAttributeError):
            param("age", "somewhere")  # type: ignore[arg-type]

    def test_explicit_overrides_docstring(self) -> None:
        meta = describe_handler(
            get_user,
            params=[param("verbose", "header", "string")],
            category="admin",
            deprecated=False,
        )
        verbose = meta.descriptor("verbose")
        assert verbose is not None
        assert verbose.location == "header"
        assert meta.descriptor("name").location == "path"  # type: ignore[union-attr]
        assert meta.category == "admin"
        assert meta.deprecated is False


class TestDeclaredParameters:
    def test_skips_var_args(self) -> None:
        assert declared_parameters(undocumented) == ("a", "b")

    def test_lambda(self) -> None:
        assert declared_parameters(lambda x, y: None) == ("x", "y")
