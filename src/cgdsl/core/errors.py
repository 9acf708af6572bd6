"""
Error types for CGDSL taxonomy validation, grammar compilation, and tooling.
"""


class CgdslError(Exception):
    """Base exception for all CGDSL tooling errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class TaxonomyConflictError(CgdslError):
    """
    Raised when two categories claim the same literal token.

    A token can only carry one highlighting scope, so a duplicate across
    categories is an authoring defect in the taxonomy.
    """

    def __init__(self, token: str, first: str, second: str):
        self.token = token
        self.first = first
        self.second = second
        super().__init__(
            f"Token '{token}' is declared in both category '{first}' and category '{second}'"
        )


class OrderingViolationError(CgdslError):
    """
    Raised when a shorter literal is declared before a longer literal it shadows.

    Examples:
    - "end" before "end stage" in the same category
    - "face" in a category listed before the category holding "face down"
    """

    def __init__(
        self,
        category: str,
        shorter: str,
        longer: str,
        other_category: str | None = None,
    ):
        self.category = category
        self.shorter = shorter
        self.longer = longer
        self.other_category = other_category
        if other_category is None or other_category == category:
            message = (
                f"In category '{category}', '{shorter}' is declared before '{longer}' "
                f"and would shadow it; declare '{longer}' first"
            )
        else:
            message = (
                f"'{shorter}' in category '{category}' is matched before "
                f"'{longer}' in category '{other_category}' and would shadow it"
            )
        super().__init__(message)


class ManifestError(CgdslError):
    """Raised when cgdsl.toml cannot be read or holds invalid values."""

    pass


class SessionError(CgdslError):
    """
    Raised when the language server session is misused or cannot start.

    Examples:
    - Starting a session twice
    - Sending a request before the session started
    - Server binary missing
    """

    pass


class GraphExportError(CgdslError):
    """Raised when a step of the relationship graph export fails."""

    def __init__(self, step: str, message: str):
        self.step = step
        super().__init__(f"{step}: {message}")
