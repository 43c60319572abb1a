"""
Exception hierarchy for the REST spec generator.

Every error carries optional context and recovery suggestions so that the CLI
can print something actionable. Configuration and hook errors are caller
problems; ``PredicateError`` signals a defect in generation logic itself.
"""

from typing import Dict, Any, Optional, List


class RestGeneratorError(Exception):
    """
    Base exception for all generator errors.

    Provides rich context and error recovery guidance.
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        suggestions: Optional[List[str]] = None,
        error_code: Optional[str] = None
    ):
        """
        Initialize the exception with context and recovery suggestions.

        Args:
            message: Human-readable error message
            context: Additional context about where/why the error occurred
            suggestions: List of potential solutions or next steps
            error_code: Unique error code for programmatic handling
        """
        super().__init__(message)
        self.message = message
        self.context = context or {}
        self.suggestions = suggestions or []
        self.error_code = error_code

    def __str__(self) -> str:
        """Return formatted error message with context."""
        lines = [super().__str__()]

        if self.error_code:
            lines.append(f"Error Code: {self.error_code}")

        if self.context:
            lines.append("Context:")
            for key, value in self.context.items():
                lines.append(f"  {key}: {value}")

        if self.suggestions:
            lines.append("Suggestions:")
            for suggestion in self.suggestions:
                lines.append(f"  • {suggestion}")

        return "\n".join(lines)


class ConfigurationError(RestGeneratorError):
    """Raised when the generation configuration is invalid."""

    def __init__(self, message: str, config_file: str = None, **kwargs):
        context = kwargs.get('context', {})
        if config_file:
            context['config_file'] = config_file

        suggestions = kwargs.get('suggestions', [])
        if not suggestions:
            suggestions = [
                "Check the configuration file syntax",
                "Global error responses must use HTTP error status codes (>= 400)",
                "Handler must be one of the supported handler identifiers",
            ]

        super().__init__(
            message,
            context=context,
            suggestions=suggestions,
            error_code="CONFIG_ERROR"
        )


class PredicateError(RestGeneratorError):
    """
    Raised when a predicate is used outside its contract.

    This is a programming error in generation logic (for example asking a
    grouped predicate for its single operation name), never bad user input.
    """

    def __init__(self, message: str, predicate: Any = None, **kwargs):
        context = kwargs.get('context', {})
        if predicate is not None:
            context['predicate'] = repr(predicate)

        suggestions = kwargs.get('suggestions', [])
        if not suggestions:
            suggestions = [
                "Call explode() on grouped predicates before converting them",
            ]

        super().__init__(
            message,
            context=context,
            suggestions=suggestions,
            error_code="PREDICATE_ERROR"
        )


class HookError(RestGeneratorError):
    """Raised when a user-supplied pipeline hook fails. Generation is aborted."""

    def __init__(self, message: str, hook: str = None, **kwargs):
        context = kwargs.get('context', {})
        if hook:
            context['hook'] = hook

        suggestions = kwargs.get('suggestions', [])
        if not suggestions:
            suggestions = [
                "Check the hook implementation for the stage listed above",
                "No output was written for this run",
            ]

        super().__init__(
            message,
            context=context,
            suggestions=suggestions,
            error_code="HOOK_ERROR"
        )


class SpecGenerationError(RestGeneratorError):
    """Raised when the schema graph cannot be turned into a specification."""

    def __init__(self, message: str, schema: str = None, edge: str = None, **kwargs):
        context = kwargs.get('context', {})
        if schema:
            context['schema'] = schema
        if edge:
            context['edge'] = edge

        suggestions = kwargs.get('suggestions', [])
        if not suggestions:
            suggestions = [
                "Verify every edge target exists in the schema graph",
                "Check for naming conflicts between schemas",
            ]

        super().__init__(
            message,
            context=context,
            suggestions=suggestions,
            error_code="SPEC_GENERATION_ERROR"
        )


class SpecWriteError(RestGeneratorError):
    """Raised when the finished specification cannot be written."""

    def __init__(self, message: str, destination: str = None, **kwargs):
        context = kwargs.get('context', {})
        if destination:
            context['destination'] = destination

        super().__init__(
            message,
            context=context,
            suggestions=kwargs.get('suggestions', [
                "Check that the output directory is writable",
            ]),
            error_code="SPEC_WRITE_ERROR"
        )
