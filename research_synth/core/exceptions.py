"""Error taxonomy for the synthesizer pipeline."""


class SynthesizerError(Exception):
    """Base exception for the research synthesizer."""

    pass


class FetchError(SynthesizerError):
    """A single source could not be retrieved. Never fatal to a request."""

    pass


class FetchTimeout(FetchError):
    pass


class UnsafeUrlError(FetchError):
    pass


class InferenceUnavailable(SynthesizerError):
    """Transport or status failure while talking to the model service."""

    pass


class UnparseableResponse(SynthesizerError):
    """No recovery strategy could coerce the model output into a JSON object."""

    def __init__(self, message: str, raw: str = ""):
        self.raw = raw
        super().__init__(message)
