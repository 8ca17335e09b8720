"""
Exception hierarchy for the analysis pipeline.

AnalysisError subclasses are fatal input errors: they abort a run and reach
the caller unchanged. LLMError subclasses are raised by the language-model
client and are always absorbed by the component that made the call.
"""


class AnalysisError(Exception):
    """Base class for errors that abort an analysis run."""


class InvalidVideoReferenceError(AnalysisError):
    pass


class VideoNotFoundError(AnalysisError):
    pass


class CommentsDisabledError(AnalysisError):
    pass


class NoCommentsError(AnalysisError):
    pass


class AllCommentsFilteredError(AnalysisError):
    pass


class ClassificationError(AnalysisError):
    """Too few comments survived classification (only when the ratio guard is enabled)."""


class LLMError(Exception):
    """A language-model call failed."""


class MalformedResponseError(LLMError):
    """The model answered, but not with the JSON shape we asked for."""
