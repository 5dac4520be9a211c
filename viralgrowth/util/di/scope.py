"""Custom Dishka scopes for viralgrowth."""

from dishka import BaseScope, new_scope


class Scope(BaseScope):  # type: ignore[misc]  # BaseScope is designed to be subclassed
    """viralgrowth dependency injection scopes.

    - APP: Application lifetime. Everything is a singleton: the single-flight
      guarantee depends on there being exactly one scheduler and one store.
    """

    APP = new_scope("APP")
