"""Exception hierarchy shared by the resolver, providers and driver."""


class Autoi18nError(Exception):
    """Base class for every error raised by autoi18n."""


class ConfigError(Autoi18nError):
    """The configuration file or the command-line overrides are invalid."""


class ResolutionError(Autoi18nError):
    """A translation reference could not be resolved to files on disk."""


class FileOperationError(Autoi18nError):
    """Creating, listing, reading or writing a path failed."""

    def __init__(self, message: str, path) -> None:
        super().__init__(message)
        self.path = path


class ProviderError(Autoi18nError):
    """The translation service failed or returned an unusable answer."""
