"""Router and application configuration.

Both configs are frozen dataclasses: immutable after creation,
IDE-autocompletable, no string-key dict lookups.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class RouterConfig:
    """How route patterns are compiled and registrations are reported.

    All fields have defaults matching Express-style routers::

        config = RouterConfig(case_sensitive=True, strict=True)
    """

    # Pattern compilation
    case_sensitive: bool = False
    strict: bool = False  # True: "/users/" no longer matches "/users"
    end: bool = True  # False: "/api" also matches "/api/anything"

    # Log a warning when a duplicate method or not-found registration is ignored
    warn_on_duplicate: bool = True


@dataclass(frozen=True, slots=True)
class AppConfig:
    """ASGI adapter configuration.

    ``debug=True`` puts the exception repr into 500 response bodies.
    """

    router: RouterConfig = field(default_factory=RouterConfig)
    debug: bool = False
