"""Custom exceptions for the amplicon realigner."""


class RealignerError(Exception):
    """Base exception for all realigner errors."""
    pass


class ParseError(RealignerError):
    """Exception raised during input parsing."""

    def __init__(self, message: str, line_number: int = None, line_content: str = None):
        self.line_number = line_number
        self.line_content = line_content

        if line_number is not None:
            message = f"Line {line_number}: {message}"
        if line_content is not None:
            message = f"{message} (content: {line_content[:50]}...)"

        super().__init__(message)


class MalformedTargetRecord(ParseError):
    """A target (BED) record is missing a required field or has a non-numeric coordinate."""
    pass


class LengthMismatch(RealignerError):
    """Exception raised when comparing sequences of different lengths."""

    def __init__(self, message: str, expected: int = None, actual: int = None):
        self.expected = expected
        self.actual = actual

        if expected is not None and actual is not None:
            message = f"{message} (expected {expected} bases, got {actual})"

        super().__init__(message)


class UnreadableReference(RealignerError):
    """Exception raised when the reference FASTA cannot be opened or queried."""

    def __init__(self, message: str, path: str = None, region: str = None):
        self.path = path
        self.region = region

        if path is not None:
            message = f"Reference {path}: {message}"
        if region is not None:
            message = f"{message} (region: {region})"

        super().__init__(message)


class UnreadableAlignmentSource(RealignerError):
    """Exception raised when an alignment file cannot be opened, queried or written."""

    def __init__(self, message: str, path: str = None, region: str = None):
        self.path = path
        self.region = region

        if path is not None:
            message = f"Alignment file {path}: {message}"
        if region is not None:
            message = f"{message} (region: {region})"

        super().__init__(message)


class AlignmentError(RealignerError):
    """Exception raised during pairwise alignment."""

    def __init__(self, message: str, read_name: str = None, target_name: str = None):
        self.read_name = read_name
        self.target_name = target_name

        if read_name is not None:
            message = f"Alignment failed for read {read_name}: {message}"
        if target_name is not None:
            message = f"{message} (target: {target_name})"

        super().__init__(message)


class ConfigurationError(RealignerError):
    """Exception raised for configuration errors."""

    def __init__(self, message: str, config_file: str = None, parameter: str = None):
        self.config_file = config_file
        self.parameter = parameter

        if config_file is not None:
            message = f"Configuration error in {config_file}: {message}"
        if parameter is not None:
            message = f"{message} (parameter: {parameter})"

        super().__init__(message)
