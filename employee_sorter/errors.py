"""
Error taxonomy.

Every failure a user can trigger is a SorterError carrying a readable
message. The state controller turns these into notifications; only
MissingCredential is fatal, and only at startup.
"""


class SorterError(Exception):
    """Base class for user-facing failures."""

    default_message = "An unknown error occurred."

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    @property
    def kind(self) -> str:
        return type(self).__name__


class MissingCredential(SorterError):
    default_message = "GROQ_API_KEY environment variable is not set"


class InvalidUpload(SorterError):
    default_message = "Please upload a valid PDF file."


class UnsupportedDocument(SorterError):
    default_message = "The PDF file is password-protected. Please provide a decrypted file."


class CorruptDocument(SorterError):
    default_message = "Failed to process the PDF file. It might be corrupted or in an unsupported format."


class EnvironmentUnavailable(SorterError):
    default_message = "PDF processing library is not loaded. Please wait a moment and try again."


class AnalysisFailed(SorterError):
    default_message = "Failed to analyze resume."


class RankingFailed(SorterError):
    default_message = "Failed to rank employees."


class DistributionFailed(SorterError):
    default_message = "Failed to distribute tasks."
