class LangfillError(Exception):
    """Base class for every error raised by langfill."""


class ConfigError(LangfillError):
    pass


class SourceFileMissing(LangfillError):
    def __init__(self, path):
        self.path = path
        super().__init__(f"Source file '{path}' not found. Please check your path.")


class SourceFileMalformed(LangfillError):
    def __init__(self, path, reason):
        self.path = path
        super().__init__(f"Source file '{path}' is not a valid locale JSON: {reason}")


class LocaleFileMalformed(LangfillError):
    def __init__(self, path, reason):
        self.path = path
        super().__init__(f"Locale file '{path}' could not be read as JSON: {reason}")


class TranslationServiceError(LangfillError):
    """A single call to a translation provider failed."""


class TranslationFailure(LangfillError):
    """A leaf could not be translated within its retry budget."""

    def __init__(self, text, language, attempts):
        self.text = text
        self.language = language
        self.attempts = attempts
        super().__init__(
            f'Could not translate "{text}" to {language} after {attempts} attempts.'
        )


class PersistenceFailure(LangfillError):
    def __init__(self, path, reason):
        self.path = path
        super().__init__(f"Could not write '{path}': {reason}")
