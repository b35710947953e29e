"""docseal: encrypt protected HTML sections and seal the key per recipient."""

from .core.encryptor import DocumentEncryptor, generate_encrypted_document
from .core.exceptions import DocSealError

__version__ = "0.1.0"

__all__ = ["DocumentEncryptor", "generate_encrypted_document", "DocSealError", "__version__"]
