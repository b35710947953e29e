"""
Exceptions for the docseal core
Every failure of the encryption transform derives from DocSealError so callers
have a single error to catch
"""


class DocSealError(Exception):
    # general container for errors
    pass


class ParseError(DocSealError):
    # raised when the input document cannot be parsed
    pass


class NoProtectedRegionsError(DocSealError):
    # raised when a document has no protected sections to encrypt
    pass


class InvalidContentError(DocSealError):
    # raised when section content is not valid UTF-8 text
    pass


class KeyGenerationError(DocSealError):
    # raised when the content key cannot be generated or serialized
    pass


class ContentEncryptionError(DocSealError):
    # raised when the AEAD primitive fails on section content
    pass


class KeySealError(DocSealError):
    # raised when the content key cannot be sealed for a recipient
    pass


class MissingHeadError(DocSealError):
    # raised when the document has no head to carry the key manifest
    pass


class KeyProviderError(DocSealError):
    # raised when a recipient public key cannot be fetched or loaded
    pass


class ConfigurationError(DocSealError):
    # raised on invalid environment configuration
    pass
