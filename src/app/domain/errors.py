from __future__ import annotations


class RecipeAppError(Exception):
    pass


class InvalidRecipeIdError(RecipeAppError):
    def __init__(self, recipe_id: str):
        super().__init__(f"Invalid recipe ID format: {recipe_id}")
        self.recipe_id = recipe_id


class InvalidQueryError(RecipeAppError):
    def __init__(self, message: str = "Search query is required"):
        super().__init__(message)


class RecipeNotFoundError(RecipeAppError):
    def __init__(self, recipe_id: str):
        super().__init__(f"Recipe not found: {recipe_id}")
        self.recipe_id = recipe_id


class FavoriteConflictError(RecipeAppError):
    def __init__(self, owner_id: str | None, recipe_ref: str):
        super().__init__(f"Recipe {recipe_ref} is already in favorites")
        self.owner_id = owner_id
        self.recipe_ref = recipe_ref


class RepositoryError(RecipeAppError):
    def __init__(self, operation: str, reason: str):
        super().__init__(f"Repository error during {operation}: {reason}")
        self.operation = operation
        self.reason = reason


class AuthError(RecipeAppError):
    pass


class UserAlreadyExistsError(AuthError):
    def __init__(self, email: str):
        super().__init__("User already exists")
        self.email = email


class InvalidCredentialsError(AuthError):
    def __init__(self, message: str = "Invalid credentials"):
        super().__init__(message)
