from typing import Optional, Dict, Any

class ISIMBaseError(Exception):
    """
    Root exception of the ISIM project.
    Every custom exception must inherit from this class.

    Attributes:
        code (str): Error identifier (e.g. 'CONF_Error')
        message (str): Human readable message
        details (Optional[Dict[str, Any]]): Extra debugging information
    """
    def __init__(
        self,
        code: str,
        message: str,
        details: Optional[Dict[str, Any]] = None
    ):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(f"[{code}] {message}")

class ConfigurationError(ISIMBaseError):
    """Raised when settings cannot be loaded or validated."""
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(code="CONF_Error", message=message, details=details)

class ExtractionError(ISIMBaseError):
    """Résumé could not be read. Surfaced to the user; no session is created."""
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None, code: str = "EXTRACT_Error"):
        super().__init__(code=code, message=message, details=details)

class UnsupportedFormatError(ExtractionError):
    """Résumé mime type is not one of the supported document types."""
    def __init__(self, mime_type: str):
        super().__init__(
            message=f"Unsupported file type: {mime_type}",
            details={"mime_type": mime_type},
            code="EXTRACT_UnsupportedFormat"
        )

class GenerationError(ISIMBaseError):
    """
    External generator (language model) failed or returned unusable output.
    Contained inside the provider that raised it.
    """
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(code="GEN_Error", message=message, details=details)

class PersistenceCorruptionError(ISIMBaseError):
    """Stored roster payload is unreadable or has the wrong shape."""
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(code="PERSIST_Corrupted", message=message, details=details)

class InvalidTransitionError(ISIMBaseError):
    """Session state machine was used against its own contract."""
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(code="FSM_InvalidTransition", message=message, details=details)
