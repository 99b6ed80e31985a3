# budget_tracker/exceptions.py
from __future__ import annotations


class BudgetError(RuntimeError):
    """Base class for errors surfaced to the CLI and web entry points."""


class RemoteFetchError(BudgetError):
    """A request to the transactions API failed.

    Raised for non-success HTTP statuses as well as transport failures
    (DNS, refused connections, timeouts). ``body`` holds the response text
    when the server answered.
    """

    def __init__(self, message: str, status_code: int | None = None, body: str = "") -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class MissingSecretConfig(BudgetError):
    """The bearer token was not found in the environment."""

    def __init__(self, env_var: str) -> None:
        super().__init__(f"{env_var} must be set")
        self.env_var = env_var
