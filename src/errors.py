"""Exception types raised by the duplicate detector.

Only InvalidArgument (and EmptyBatch) is fatal to a run. The other errors are
raised and caught inside the batch or publish step that produced them.
"""


class DuplicateDetectionError(Exception):
    """Base class for all duplicate detector errors."""


class InvalidArgument(DuplicateDetectionError, ValueError):
    """Raised for malformed configuration or an invalid call argument."""


class EmptyBatch(InvalidArgument):
    """Raised when a prompt is requested for a batch with no candidates."""


class UpstreamUnavailable(DuplicateDetectionError):
    """Raised when the inference service produced no text for a batch."""


class MalformedModelOutput(DuplicateDetectionError):
    """Raised when a batch response is not JSON or fails validation.

    Attributes:
        raw_text (str): The offending model output
        not_json (bool): True if the text could not be parsed at all
    """

    def __init__(self, message: str, raw_text: str = "", not_json: bool = False):
        super().__init__(message)
        self.raw_text = raw_text
        self.not_json = not_json


class PublishFailure(DuplicateDetectionError):
    """Raised when a comment or labels could not be applied to an issue."""
