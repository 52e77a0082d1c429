"""
Exceptions shared by the schema, generators and orchestrator.
"""


class GeneratorError(Exception):
    """Base exception for code generation errors."""

    pass


class InvalidSpecError(GeneratorError):
    """The parameter document cannot be turned into source code."""

    pass


class MissingClassNameError(InvalidSpecError):
    """The parameter document has an empty class name."""

    pass


class InstantiationNotFoundError(GeneratorError):
    """No loaded type matches a pending instantiation request."""

    def __init__(self, qualified_name: str):
        super().__init__(f"Generated type not found: {qualified_name}")
        self.qualified_name = qualified_name


class PendingRequestError(GeneratorError):
    """An apply was refused because an earlier request is still pending."""

    pass
