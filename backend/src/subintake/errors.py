"""Error taxonomy for document intake.

Per-document errors carry a stable ``error_code`` so batch results and logs
can be filtered without parsing messages.
"""


class IntakeError(Exception):
    """Base error with a structured code and message."""

    def __init__(self, error_code: str, message: str):
        self.error_code = error_code
        self.message = message
        super().__init__(message)


class UnsupportedFileType(IntakeError):
    """The file extension is not one the intake can read."""

    def __init__(self, filename: str, extension: str | None):
        self.filename = filename
        self.extension = extension
        super().__init__(
            error_code="UNSUPPORTED_FILE_TYPE",
            message=f"Unsupported file type: {extension or '(none)'}",
        )


class ParseFailure(IntakeError):
    """The document reader raised while reading the file."""

    def __init__(self, filename: str, reason: str):
        self.filename = filename
        self.reason = reason
        super().__init__(
            error_code="PARSE_FAILURE",
            message=f"Failed to parse {filename}: {reason}",
        )


class AugmentationFailure(IntakeError):
    """The augmentation provider failed or returned an unusable response."""

    def __init__(self, message: str):
        super().__init__(error_code="AUGMENTATION_FAILURE", message=message)
