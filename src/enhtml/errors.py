"""Exceptions raised while building fragments and assembling documents."""


class EnhtmlError(Exception):
    """Base class for all enhtml errors."""


class InvalidColumnError(EnhtmlError):
    """A computed column descriptor has no resolvable label or value."""


class ConfigurationError(EnhtmlError):
    """Document inputs contradict each other."""


class StylesheetConflictError(ConfigurationError):
    """Both an inline stylesheet and a stylesheet URI were supplied."""

    def __init__(self) -> None:
        super().__init__(
            "an inline stylesheet and a stylesheet URI are mutually exclusive; supply one"
        )


class MalformedMarkupError(EnhtmlError):
    """Assembled markup could not be post-processed (unbalanced tables, open header row)."""


class FragmentClosedError(EnhtmlError):
    """A record was fed to a fragment builder that has already been closed."""
