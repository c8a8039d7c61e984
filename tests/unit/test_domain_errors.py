from __future__ import annotations

import pytest

from src.app.domain.errors import (
    AuthError,
    FavoriteConflictError,
    InvalidCredentialsError,
    InvalidQueryError,
    InvalidRecipeIdError,
    RecipeAppError,
    RecipeNotFoundError,
    RepositoryError,
    UserAlreadyExistsError,
)


class TestRecipeAppError:
    def test_base_exception(self) -> None:
        error = RecipeAppError("Base error")
        assert str(error) == "Base error"
        assert isinstance(error, Exception)


class TestInvalidRecipeIdError:
    def test_includes_recipe_id(self) -> None:
        error = InvalidRecipeIdError("search")
        assert "search" in str(error)
        assert error.recipe_id == "search"


class TestInvalidQueryError:
    def test_default_message(self) -> None:
        assert str(InvalidQueryError()) == "Search query is required"

    def test_custom_message(self) -> None:
        assert str(InvalidQueryError("Category is required")) == "Category is required"


class TestRecipeNotFoundError:
    def test_includes_recipe_id(self) -> None:
        error = RecipeNotFoundError("52771")
        assert "52771" in str(error)
        assert error.recipe_id == "52771"


class TestFavoriteConflictError:
    def test_keeps_owner_and_recipe(self) -> None:
        error = FavoriteConflictError("alice", "52771")
        assert "52771" in str(error)
        assert error.owner_id == "alice"
        assert error.recipe_ref == "52771"

    def test_anonymous_owner(self) -> None:
        error = FavoriteConflictError(None, "52771")
        assert error.owner_id is None


class TestRepositoryError:
    def test_includes_operation_and_reason(self) -> None:
        error = RepositoryError("upsert", "Connection refused")
        assert "upsert" in str(error)
        assert "Connection refused" in str(error)
        assert error.operation == "upsert"
        assert error.reason == "Connection refused"


class TestAuthErrors:
    def test_user_already_exists_message(self) -> None:
        error = UserAlreadyExistsError("a@b.test")
        assert str(error) == "User already exists"
        assert error.email == "a@b.test"

    def test_invalid_credentials_default_message(self) -> None:
        assert str(InvalidCredentialsError()) == "Invalid credentials"


class TestExceptionHierarchy:
    def test_all_domain_errors_inherit_from_recipe_app_error(self) -> None:
        assert issubclass(InvalidRecipeIdError, RecipeAppError)
        assert issubclass(InvalidQueryError, RecipeAppError)
        assert issubclass(RecipeNotFoundError, RecipeAppError)
        assert issubclass(FavoriteConflictError, RecipeAppError)
        assert issubclass(RepositoryError, RecipeAppError)
        assert issubclass(AuthError, RecipeAppError)

    def test_auth_errors_inherit_from_auth_error(self) -> None:
        assert issubclass(UserAlreadyExistsError, AuthError)
        assert issubclass(InvalidCredentialsError, AuthError)

    def test_can_catch_by_base_class(self) -> None:
        with pytest.raises(RecipeAppError):
            raise RecipeNotFoundError("52771")
