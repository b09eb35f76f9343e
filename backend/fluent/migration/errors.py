"""Exception types for legacy schema migration."""


class MigrationConfigError(Exception):
    """Migration cannot start: required configuration is missing or invalid."""

    pass


class PlanConflictError(Exception):
    """Two different queries target the same table for the same locale."""

    pass


class InvalidIdentifierError(ValueError):
    """A table, field or locale name is not a safe SQL identifier."""

    pass
