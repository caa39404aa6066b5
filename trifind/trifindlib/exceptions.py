from typing import Optional


class DomainException(Exception):
    """Base class for domain-specific exceptions."""

    def __init__(
        self, message: Optional[str] = None, log_message: Optional[str] = None
    ):
        super().__init__(message)
        self.log_message = log_message  # In case devs want to include extra log info.


class TemplateConstructionError(DomainException):
    """
    Raised when the template bank cannot be built.

    The finder is unusable until the template source is fixed.
    """

    pass


class TemplateDirectoryError(TemplateConstructionError):
    """Raised when the template directory is missing or unreadable"""

    pass


class TemplateDecodeError(TemplateConstructionError):
    """Raised when a template image cannot be decoded or is empty"""

    pass


class TemplatePaddingError(TemplateConstructionError):
    """Raised when the padded template width is not the expected width"""

    pass


class EmptyTemplateBankError(TemplateConstructionError):
    """Raised when no valid template was found"""

    pass


class FrameDecodeError(DomainException):
    """Raised when an input frame file cannot be decoded"""

    pass
