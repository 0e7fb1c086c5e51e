"""Tests for approute.errors: exception hierarchy and error messages."""

import pytest

from approute.errors import (
    ApprouteError,
    ConfigurationError,
    DuplicateParameter,
    FieldMismatchError,
    InvalidIdentifier,
    InvalidTrailingSlash,
    MissingLeadingForwardSlash,
    NoMatches,
    NonAsciiChars,
    NoQueryString,
    ParamParseError,
    QueryDecodeError,
    QueryParseError,
    RouteParseError,
    RouteValueError,
    TemplateError,
)


class TestHierarchy:
    @pytest.mark.parametrize(
        "cls",
        [
            MissingLeadingForwardSlash,
            NonAsciiChars,
            InvalidIdentifier,
            InvalidTrailingSlash,
            DuplicateParameter,
        ],
    )
    def test_template_errors(self, cls: type) -> None:
        assert issubclass(cls, TemplateError)
        assert issubclass(cls, ConfigurationError)

    def test_field_mismatch_is_configuration_error(self) -> None:
        assert issubclass(FieldMismatchError, ConfigurationError)
        assert not issubclass(FieldMismatchError, TemplateError)

    @pytest.mark.parametrize(
        "cls", [NoMatches, NoQueryString, ParamParseError, QueryParseError, RouteValueError]
    )
    def test_parse_errors(self, cls: type) -> None:
        assert issubclass(cls, RouteParseError)
        assert not issubclass(cls, ConfigurationError)

    def test_roots(self) -> None:
        assert issubclass(ConfigurationError, ApprouteError)
        assert issubclass(RouteParseError, ApprouteError)

    def test_query_decode_error_is_value_error(self) -> None:
        assert issubclass(QueryDecodeError, ValueError)
        assert issubclass(QueryDecodeError, ApprouteError)


class TestTemplateErrorMessages:
    def test_missing_slash(self) -> None:
        err = MissingLeadingForwardSlash("users")
        assert err.template == "users"
        assert str(err) == "Missing leading '/' in route template 'users'"

    def test_invalid_identifier(self) -> None:
        err = InvalidIdentifier("/users/:1x", "1x")
        assert err.name == "1x"
        assert "'1x'" in str(err)
        assert "'/users/:1x'" in str(err)

    def test_duplicate_parameter(self) -> None:
        err = DuplicateParameter("/a/:x/b/:x", "x")
        assert err.name == "x"
        assert "more than once" in str(err)


class TestParseErrorMessages:
    def test_no_matches(self) -> None:
        assert str(NoMatches("/nope")) == "No match for path '/nope'"
        assert str(NoMatches()) == "No match"

    def test_param_parse_error(self) -> None:
        err = ParamParseError("user_id", "invalid digit found in string: 'x'")
        assert err.name == "user_id"
        assert str(err) == "Path parameter 'user_id': invalid digit found in string: 'x'"

    def test_query_parse_error(self) -> None:
        err = QueryParseError("query", "missing field `keyword`")
        assert err.description == "missing field `keyword`"
        assert str(err) == "Query field 'query': missing field `keyword`"

    def test_route_value_error(self) -> None:
        err = RouteValueError("/pages/:page", "pages start at 1")
        assert err.route == "/pages/:page"
        assert str(err) == "Route value for '/pages/:page': pages start at 1"

    def test_catch_by_family(self) -> None:
        with pytest.raises(RouteParseError):
            raise NoQueryString()
