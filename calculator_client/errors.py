"""Error kinds raised by the calculator client."""


class CalculatorClientError(Exception):
    """Base class for every failure the client reports."""


class CredentialLoadError(CalculatorClientError):
    """Raised when a key file or config file is missing or malformed."""


class ProgramResolutionError(CalculatorClientError):
    """Raised when the program id cannot be resolved."""


class InvalidInstructionError(CalculatorClientError):
    """Raised for unknown operation codes or truncated payloads."""


class RemoteError(CalculatorClientError):
    """Raised when the node fails, rejects, or cannot be reached."""


class RemoteTimeoutError(RemoteError):
    """Raised when the node does not answer or confirm in time."""
