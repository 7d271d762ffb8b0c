"""Error taxonomy for the lesson generation pipeline."""


class LessonPipelineError(Exception):
    """Base exception for pipeline errors."""
    pass


class TransportFailure(LessonPipelineError):
    """The model API call failed or returned a non-success status."""
    pass


class InvalidResponseFormat(LessonPipelineError):
    """No JSON object could be located in the model output."""
    pass


class MalformedPayload(LessonPipelineError):
    """A JSON object was found but does not parse or has the wrong shape."""
    pass


class StorageReadFailure(LessonPipelineError):
    """The persisted result log could not be read. Recovered as an empty log."""
    pass


class LessonGenerationError(LessonPipelineError):
    """Raised at the pipeline boundary for any failed lesson generation."""

    def __init__(self, message: str = "Failed to generate lesson content"):
        super().__init__(message)
