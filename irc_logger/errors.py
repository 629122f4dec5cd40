"""Error taxonomy for the logger and the exit status derived from it."""


class IrcLoggerError(Exception):
    """Base class for every error the logger reports to the operator."""


class ConfigError(IrcLoggerError):
    """A required config key is absent or a value cannot be parsed."""

    MISSING = "missing"
    INVALID = "invalid"

    def __init__(self, kind: str, key: str, message: str | None = None):
        self.kind = kind
        self.key = key
        if message is None:
            if kind == self.MISSING:
                message = f"{key} was not found in config"
            else:
                message = f"{key} is not valid"
        super().__init__(message)

    @classmethod
    def missing(cls, key: str) -> "ConfigError":
        return cls(cls.MISSING, key)

    @classmethod
    def invalid(cls, key: str) -> "ConfigError":
        return cls(cls.INVALID, key)


class ConnectError(IrcLoggerError):
    """IRC or MongoDB could not be reached (or refused our credentials)."""


class SessionError(IrcLoggerError):
    """The IRC session failed after startup. Always fatal."""


class PersistenceError(IrcLoggerError):
    """A single insert failed. Reported by the writer and never propagated."""


def exit_status(error: BaseException) -> int:
    """Return the first errno found along the error's cause chain, else 1."""
    seen = set()
    current = error
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        code = getattr(current, "errno", None)
        if isinstance(code, int) and code > 0:
            return code
        current = current.__cause__ or current.__context__
    return 1
