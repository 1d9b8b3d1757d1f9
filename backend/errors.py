"""Exceptions raised while converting a link.

    ConversionError
    ├── UnrecognizedLinkError       (400, the input matches no catalog)
    ├── NotFoundError               (id resolves to nothing upstream)
    ├── UpstreamCommunicationError  (network failure or non-404 status)
    └── AuthError                   (client-credentials exchange failed)

A matcher that finds no candidate is not an error; the conversion simply
carries ``outputUrl: null``.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class ConversionError(Exception):
    status_code = 500

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"error": self.code, "message": self.message}
        if self.details:
            body["details"] = self.details
        return body


class UnrecognizedLinkError(ConversionError):
    status_code = 400

    def __init__(self, url: Optional[str], message: str = 'URL in "url" parameter was not recognized.') -> None:
        super().__init__(message, details={"providedUrl": url})


class NotFoundError(ConversionError):
    """The owning catalog has no item for the given id.

    Reported as a 500 like any other failed lookup; see DESIGN.md.
    """


class UpstreamCommunicationError(ConversionError):
    pass


class AuthError(ConversionError):
    pass
