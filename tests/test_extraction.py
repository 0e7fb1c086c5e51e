"""Tests for approute.extraction: dataclass route declarations."""

from dataclasses import dataclass
from enum import Enum

import pytest

from approute import path_field, query_field, route, shape_of
from approute.errors import (
    ConfigurationError,
    FieldMismatchError,
    InvalidIdentifier,
    NoMatches,
    NoQueryString,
    ParamParseError,
    QueryParseError,
    RouteParseError,
    RouteValueError,
)
from approute.routing.shape import RouteShape

# -- Query groups ------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class UserListQuery:
    limit: int | None = None
    offset: int | None = None
    keyword: str | None = None
    friends_only: bool = False


class Country(Enum):
    COUNTRY_A = "country_a"
    COUNTRY_B = "country_b"
    COUNTRY_C = "country_c"


@dataclass(frozen=True, slots=True)
class Building:
    name: str
    number: int | None = None


@dataclass(frozen=True, slots=True)
class Address:
    street_name: str | None = None
    apt_number: int | None = None
    country: Country | None = None
    building: Building | None = None


@dataclass(frozen=True, slots=True)
class ParentQuery:
    address: Address | None = None


@dataclass(frozen=True, slots=True)
class VecQuery:
    friend_ids: list[int]


class SortDirection(Enum):
    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True, slots=True)
class SubmissionsQuery:
    column: str | None = None
    direction: SortDirection | None = None
    keyword: str | None = None


@dataclass(frozen=True, slots=True)
class LimitOffsetQuery:
    limit: int | None = None
    offset: int | None = None


# -- Routes ------------------------------------------------------------------


@route("/users")
@dataclass(frozen=True, slots=True)
class UsersListPath:
    pass


@route("/users/:user_id")
@dataclass(frozen=True, slots=True)
class UserDetailPath:
    user_id: int = path_field(converter="u64")


@route("/users/:user_id/friends/:friend_name")
@dataclass(frozen=True, slots=True)
class UserFriendDetailPath:
    user_id: int = path_field(converter="u64")
    friend_name: str


@route("/users")
@dataclass(frozen=True, slots=True)
class UsersListWithQuery:
    query: UserListQuery = query_field()


@route("/users/:user_id")
@dataclass(frozen=True, slots=True)
class UserDetailExtraPath:
    user_id: int = path_field(converter="u8")
    query: UserListQuery | None = query_field(default=None)


@route("/users/:user_id")
@dataclass(frozen=True, slots=True)
class UserDetailNestedQueryPath:
    user_id: int = path_field(converter="u32")
    query: ParentQuery | None = query_field(default=None)


@route("/users/:user_id")
@dataclass(frozen=True, slots=True)
class UserDetailVecQueryPath:
    user_id: int = path_field(converter="u32")
    query: VecQuery | None = query_field(default=None)


@route("/p/:project_id/exams/:exam_id/submissions_expired")
@dataclass(frozen=True, slots=True)
class ExpiredSubmissionsPath:
    project_id: str
    exam_id: int = path_field(converter="u64")
    query: SubmissionsQuery | None = query_field(default=None)
    limit: LimitOffsetQuery | None = query_field(default=None)


@route("/orders/:direction")
@dataclass(frozen=True, slots=True)
class OrderedPath:
    direction: SortDirection


@route("/pages/:page")
@dataclass(frozen=True, slots=True)
class PagePath:
    page: int = path_field(converter="u32")

    def __post_init__(self) -> None:
        if self.page == 0:
            msg = "pages start at 1"
            raise ValueError(msg)


class TestPathOnly:
    def test_no_params(self) -> None:
        assert UsersListPath.parse("/users") == UsersListPath()

    def test_trailing_slash(self) -> None:
        with pytest.raises(NoMatches):
            UsersListPath.parse("/users/")

    def test_no_leading_slash(self) -> None:
        with pytest.raises(NoMatches):
            UsersListPath.parse("users")

    def test_one_param(self) -> None:
        assert UserDetailPath.parse("/users/642151") == UserDetailPath(user_id=642151)

    def test_invalid_param_type(self) -> None:
        with pytest.raises(ParamParseError):
            UserDetailPath.parse("/users/not_a_u64")

    def test_one_param_no_leading_slash(self) -> None:
        with pytest.raises(NoMatches):
            UserDetailPath.parse("users/4216")

    def test_two_params(self) -> None:
        path = UserFriendDetailPath.parse("/users/612451/friends/steve")
        assert path == UserFriendDetailPath(user_id=612451, friend_name="steve")

    @pytest.mark.parametrize("name", ["田中", "🌮🌮🌮"])
    def test_two_params_utf8(self, name: str) -> None:
        path = UserFriendDetailPath.parse(f"/users/612451/friends/{name}")
        assert path.friend_name == name

    def test_enum_param(self) -> None:
        assert OrderedPath.parse("/orders/desc").direction is SortDirection.DESC
        with pytest.raises(ParamParseError, match="unknown variant"):
            OrderedPath.parse("/orders/sideways")

    def test_value_validation(self) -> None:
        assert PagePath.parse("/pages/2") == PagePath(page=2)
        with pytest.raises(RouteValueError, match="pages start at 1") as exc_info:
            PagePath.parse("/pages/0")
        assert isinstance(exc_info.value, RouteParseError)

    def test_path_pattern(self) -> None:
        assert UserDetailPath.path_pattern() == r"^/users/(?P<user_id>[^/]+)$"


class TestRequiredQuery:
    def test_required_missing(self) -> None:
        with pytest.raises(NoQueryString):
            UsersListWithQuery.parse("/users")

    def test_simple(self) -> None:
        path = UsersListWithQuery.parse("/users?friends_only=true")
        assert path == UsersListWithQuery(query=UserListQuery(friends_only=True))

    def test_missing_bool_field(self) -> None:
        assert UsersListWithQuery.parse("/users?") == UsersListWithQuery(query=UserListQuery())

    def test_invalid_type(self) -> None:
        with pytest.raises(QueryParseError):
            UsersListWithQuery.parse("/users?offset=test")

    def test_all_defined(self) -> None:
        path = UsersListWithQuery.parse(
            "/users?offset=10&limit=20&friends_only=false&keyword=some_keyword"
        )
        assert path.query == UserListQuery(limit=20, offset=10, keyword="some_keyword")

    def test_url_decoding(self) -> None:
        path = UsersListWithQuery.parse(
            "/users?keyword=some%20keyword%20with%20ampersand-question-equals-stuff"
            "%26%3F%3d%3a%3b%40%23%25%5e%5b%5d%7b%7D%60%22%3c%3e%E6%97%A5%E6%9C%AC%E8%AA%9E"
        )
        assert path.query.keyword == (
            "some keyword with ampersand-question-equals-stuff&?=:;@#%^[]{}`\"<>日本語"
        )

    def test_plus_sign(self) -> None:
        assert UsersListWithQuery.parse("/users?keyword=%2b").query.keyword == "+"


class TestOptionalQuery:
    def test_missing(self) -> None:
        assert UserDetailExtraPath.parse("/users/8") == UserDetailExtraPath(user_id=8)

    def test_present(self) -> None:
        path = UserDetailExtraPath.parse("/users/8?limit=55")
        assert path == UserDetailExtraPath(user_id=8, query=UserListQuery(limit=55))

    def test_num_out_of_range(self) -> None:
        with pytest.raises(ParamParseError):
            UserDetailExtraPath.parse("/users/256")


class TestNestedQuery:
    def test_one_level(self) -> None:
        path = UserDetailNestedQueryPath.parse("/users/1024?address[apt_number]=101")
        assert path.query == ParentQuery(address=Address(apt_number=101))

    def test_enum(self) -> None:
        path = UserDetailNestedQueryPath.parse(
            "/users/1024?address[apt_number]=101&address[country]=country_b"
        )
        assert path.query == ParentQuery(address=Address(apt_number=101, country=Country.COUNTRY_B))

    def test_two_levels(self) -> None:
        path = UserDetailNestedQueryPath.parse(
            "/users/1024?address[apt_number]=101&address[country]=country_b"
            "&address[building][name]=Cool%20Building"
        )
        assert path.query is not None
        assert path.query.address == Address(
            apt_number=101, country=Country.COUNTRY_B, building=Building(name="Cool Building")
        )

    def test_bad_leaf_discards_group(self) -> None:
        path = UserDetailNestedQueryPath.parse(
            "/users/1024?address[apt_number]=101&address[country]=country_b"
            "&address[building][name]=Cool%20Building&address[building][number]=not_number"
        )
        assert path == UserDetailNestedQueryPath(user_id=1024, query=None)

    def test_full(self) -> None:
        path = UserDetailNestedQueryPath.parse(
            "/users/1024?address[apt_number]=101&address[country]=country_b"
            "&address[building][name]=Cool%20Building&address[building][number]=9000"
        )
        assert path.query == ParentQuery(
            address=Address(
                apt_number=101,
                country=Country.COUNTRY_B,
                building=Building(name="Cool Building", number=9000),
            )
        )


class TestVecQuery:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("/users/1024?", None),
            ("/users/1024?friend_ids", None),
            ("/users/1024?friend_ids[]=1", VecQuery([1])),
            ("/users/1024?friend_ids[]=1&friend_ids[]=20", VecQuery([1, 20])),
            ("/users/1024?friend_ids[]=1&friend_ids[]=20&friend_ids=33", None),
            ("/users/1024?friend_ids[0]=1&friend_ids[1]=20&friend_ids[2]=33", VecQuery([1, 20, 33])),
            ("/users/1024?friend_ids[1]=20&friend_ids[2]=33&friend_ids[0]=1", VecQuery([1, 20, 33])),
        ],
    )
    def test_parse(self, raw: str, expected: VecQuery | None) -> None:
        assert UserDetailVecQueryPath.parse(raw) == UserDetailVecQueryPath(
            user_id=1024, query=expected
        )


class TestMultipleQueryFields:
    def test_no_query(self) -> None:
        path = ExpiredSubmissionsPath.parse("/p/43/exams/10/submissions_expired")
        assert path == ExpiredSubmissionsPath(project_id="43", exam_id=10)

    def test_only_question_mark(self) -> None:
        path = ExpiredSubmissionsPath.parse("/p/43/exams/10/submissions_expired?")
        assert path == ExpiredSubmissionsPath(
            project_id="43",
            exam_id=10,
            query=SubmissionsQuery(),
            limit=LimitOffsetQuery(),
        )

    def test_groups_share_the_query(self) -> None:
        path = ExpiredSubmissionsPath.parse(
            "/p/43/exams/10/submissions_expired?direction=asc&limit=5"
        )
        assert path.query == SubmissionsQuery(direction=SortDirection.ASC)
        assert path.limit == LimitOffsetQuery(limit=5)


class TestRendering:
    def test_path_only(self) -> None:
        assert str(UserFriendDetailPath(user_id=1, friend_name="steve")) == "/users/1/friends/steve"

    def test_no_params(self) -> None:
        assert str(UsersListPath()) == "/users"

    def test_optional_query_absent(self) -> None:
        path = UserDetailExtraPath(user_id=8)
        assert str(path) == "/users/8"
        assert path.query_string() is None

    def test_query_present(self) -> None:
        path = UserDetailExtraPath(user_id=8, query=UserListQuery(limit=55))
        assert str(path) == "/users/8?limit=55&friends_only=false"
        assert path.query_string() == "limit=55&friends_only=false"

    def test_present_empty_group(self) -> None:
        path = ExpiredSubmissionsPath(project_id="43", exam_id=10, query=SubmissionsQuery())
        assert str(path) == "/p/43/exams/10/submissions_expired?"

    def test_several_groups(self) -> None:
        path = ExpiredSubmissionsPath(
            project_id="p1",
            exam_id=3,
            query=SubmissionsQuery(column="name", direction=SortDirection.DESC),
            limit=LimitOffsetQuery(limit=10, offset=20),
        )
        assert str(path) == (
            "/p/p1/exams/3/submissions_expired"
            "?column=name&direction=desc&limit=10&offset=20"
        )

    def test_nested_round_trip(self) -> None:
        path = UserDetailNestedQueryPath(
            user_id=1024,
            query=ParentQuery(
                address=Address(
                    street_name="Main St",
                    country=Country.COUNTRY_C,
                    building=Building(name="Cool Building", number=9000),
                )
            ),
        )
        assert UserDetailNestedQueryPath.parse(str(path)) == path

    def test_vec_round_trip(self) -> None:
        path = UserDetailVecQueryPath(user_id=7, query=VecQuery([33, 1, 20]))
        assert str(path) == "/users/7?friend_ids[0]=33&friend_ids[1]=1&friend_ids[2]=20"
        assert UserDetailVecQueryPath.parse(str(path)) == path


class TestDeclarationErrors:
    def test_field_mismatch(self) -> None:
        with pytest.raises(FieldMismatchError) as exc_info:

            @route("/users/:user_id")
            @dataclass
            class Wrong:
                id: int

        assert exc_info.value.missing_from_path == ("id",)
        assert exc_info.value.missing_from_struct == ("user_id",)

    def test_bad_template(self) -> None:
        with pytest.raises(InvalidIdentifier):

            @route("/users/:_id")
            @dataclass
            class Wrong:
                _id: int

    def test_optional_path_field(self) -> None:
        with pytest.raises(ConfigurationError, match="No path parameter converter"):

            @route("/users/:user_id")
            @dataclass
            class Wrong:
                user_id: int | None

    def test_not_a_dataclass(self) -> None:
        class Plain:
            pass

        with pytest.raises(ConfigurationError, match="requires a dataclass"):
            route("/plain")(Plain)

    def test_shape_of_undecorated(self) -> None:
        @dataclass
        class Plain:
            pass

        with pytest.raises(ConfigurationError, match="not decorated"):
            shape_of(Plain)

    def test_shape_of(self) -> None:
        shape = shape_of(UserDetailPath(user_id=1))
        assert isinstance(shape, RouteShape)
        assert shape is shape_of(UserDetailPath)
        assert shape.template == "/users/:user_id"
