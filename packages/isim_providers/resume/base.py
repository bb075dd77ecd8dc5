from abc import ABC, abstractmethod
from packages.isim_core.dto import ResumeExtractionDTO

class IResumeExtractor(ABC):
    """
    Abstract Base Class for résumé readers.
    """

    @abstractmethod
    def extract(self, file_bytes: bytes, mime_type: str) -> ResumeExtractionDTO:
        """
        Extract contact fields and full text from an uploaded résumé.

        Args:
            file_bytes (bytes): Raw file content.
            mime_type (str): Declared content type of the upload.

        Returns:
            ResumeExtractionDTO: Fields that could not be found are "".

        Raises:
            UnsupportedFormatError: If mime_type is not a supported document type.
        """
        pass
