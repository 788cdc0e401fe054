"""Domain-specific exceptions for the CBR Gateway.

Every failure raised by the gateway derives from :class:`CBRGatewayError` and
carries a machine-readable ``error_code`` plus a ``details`` dict with enough
context (method, schema endpoint, counts, types) to diagnose the call.
"""

from __future__ import annotations

from typing import Any


class CBRGatewayError(Exception):
    """Base exception for all CBR Gateway errors."""

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize the exception.

        Args:
            message: Human-readable error message
            error_code: Machine-readable error code for programmatic handling
            details: Additional error context
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}


class DomainError(CBRGatewayError):
    """Base class for domain-layer errors."""

    pass


class ApplicationError(CBRGatewayError):
    """Base class for application-layer errors."""

    pass


class InfrastructureError(CBRGatewayError):
    """Base class for infrastructure-layer errors."""

    pass


class UnknownSchemaError(DomainError):
    """Raised when a schema identifier is not part of the registry."""

    def __init__(self, schema_id: str, known: list[str] | None = None, **kwargs: Any) -> None:
        """
        Initialize unknown schema error.

        Args:
            schema_id: Identifier that failed to resolve
            known: Identifiers the registry does know
            **kwargs: Additional error details
        """
        message = f"Unknown WSDL schema '{schema_id}'"
        if known:
            message += f" (available: {', '.join(known)})"
        details = {
            "schema_id": schema_id,
            "known_schemas": known or [],
            **kwargs.pop("details", {}),
        }
        super().__init__(message, error_code="UNKNOWN_SCHEMA", details=details)


class NoSchemaSelectedError(ApplicationError):
    """Raised when an operation needs a schema but none has been selected."""

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(
            "WSDL schema is not set",
            error_code="NO_SCHEMA_SELECTED",
            details=kwargs.pop("details", {}),
        )


class NoMethodSelectedError(ApplicationError):
    """Raised when a materialization runs before any method was selected."""

    def __init__(self, schema_id: str, **kwargs: Any) -> None:
        super().__init__(
            f"No method selected for schema '{schema_id}'",
            error_code="NO_METHOD_SELECTED",
            details={"schema_id": schema_id, **kwargs.pop("details", {})},
        )


class UnknownMethodError(DomainError):
    """Raised when a method is absent from the schema's discovered contracts."""

    def __init__(self, method_name: str, schema_id: str, endpoint: str, **kwargs: Any) -> None:
        """
        Initialize unknown method error.

        Args:
            method_name: Method the caller asked for
            schema_id: Schema that was searched
            endpoint: WSDL endpoint of the schema
            **kwargs: Additional error details
        """
        message = f"Function name {method_name} unavailable in this schema ({endpoint})"
        details = {
            "method_name": method_name,
            "schema_id": schema_id,
            "endpoint": endpoint,
            **kwargs.pop("details", {}),
        }
        super().__init__(message, error_code="UNKNOWN_METHOD", details=details)


class ArityMismatchError(DomainError):
    """Raised when the number of supplied arguments differs from the contract."""

    def __init__(
        self,
        method_name: str,
        expected: list[str],
        given: int,
        reason: str | None = None,
        **kwargs: Any,
    ) -> None:
        """
        Initialize arity mismatch error.

        Args:
            method_name: Method being called
            expected: Ordered parameter names required by the contract
            given: Number of arguments the caller supplied
            reason: Optional override for the default explanation
            **kwargs: Additional error details
        """
        message = reason or (
            f"Method {method_name} required {len(expected)} parameters "
            f"({', '.join(expected)}), but {given} given"
        )
        details = {
            "method_name": method_name,
            "expected_parameters": expected,
            "expected_count": len(expected),
            "given_count": given,
            **kwargs.pop("details", {}),
        }
        super().__init__(message, error_code="ARITY_MISMATCH", details=details)


class MissingParameterError(DomainError):
    """Raised when a contract parameter is not present in the call arguments."""

    def __init__(self, method_name: str, parameter: str, type_name: str, **kwargs: Any) -> None:
        message = (
            f'Parameter "{parameter}" with type "{type_name}" for method {method_name} not passed'
        )
        details = {
            "method_name": method_name,
            "parameter": parameter,
            "type": type_name,
            **kwargs.pop("details", {}),
        }
        super().__init__(message, error_code="MISSING_PARAMETER", details=details)


class DateParseError(DomainError):
    """Raised when a value cannot be interpreted as a calendar date."""

    def __init__(self, value: Any, reason: str | None = None, **kwargs: Any) -> None:
        message = f"Cannot convert {value!r} to a date"
        if reason:
            message += f": {reason}"
        details = {"value": repr(value), "reason": reason, **kwargs.pop("details", {})}
        super().__init__(message, error_code="DATE_PARSE_ERROR", details=details)


class ContractParseError(DomainError):
    """Raised when schema type metadata does not follow the struct grammar."""

    def __init__(self, description: str, schema_id: str | None = None, **kwargs: Any) -> None:
        """
        Initialize contract parse error.

        Args:
            description: Raw type description that failed to parse
            schema_id: Schema whose metadata was being parsed
            **kwargs: Additional error details
        """
        message = f"Malformed type description: {description.strip()!r}"
        if schema_id:
            message = f"Schema '{schema_id}': {message}"
        details = {
            "description": description,
            "schema_id": schema_id,
            **kwargs.pop("details", {}),
        }
        super().__init__(message, error_code="CONTRACT_PARSE_ERROR", details=details)


class RemoteCallError(InfrastructureError):
    """Raised when the remote service returns a fault or cannot be reached."""

    def __init__(
        self,
        fault_message: str,
        fault_code: str | None = None,
        method_name: str | None = None,
        endpoint: str | None = None,
        **kwargs: Any,
    ) -> None:
        """
        Initialize remote call error.

        Args:
            fault_message: Fault string reported by the remote side or transport
            fault_code: Fault code reported by the remote side, if any
            method_name: Remote procedure that was being invoked
            endpoint: WSDL endpoint of the schema
            **kwargs: Additional error details
        """
        details = {
            "fault_code": fault_code,
            "fault_message": fault_message,
            "method_name": method_name,
            "endpoint": endpoint,
            **kwargs.pop("details", {}),
        }
        super().__init__(fault_message, error_code="REMOTE_CALL_ERROR", details=details)
        self.fault_code = fault_code
        self.fault_message = fault_message


class SchemaConnectionError(RemoteCallError):
    """Raised when a schema's WSDL document cannot be loaded."""

    def __init__(self, endpoint: str, reason: str, **kwargs: Any) -> None:
        super().__init__(
            f"Failed to load WSDL schema at {endpoint}: {reason}",
            endpoint=endpoint,
            **kwargs,
        )
        self.error_code = "SCHEMA_CONNECTION_ERROR"


class XmlExtractionError(ApplicationError):
    """Raised when a result does not carry an XML payload in the expected field."""

    def __init__(self, method_name: str, field: str, reason: str | None = None, **kwargs: Any) -> None:
        message = f"Unable to get {method_name} result as XML object: missing or invalid '{field}'"
        if reason:
            message += f" ({reason})"
        details = {
            "method_name": method_name,
            "field": field,
            "reason": reason,
            **kwargs.pop("details", {}),
        }
        super().__init__(message, error_code="XML_EXTRACTION_ERROR", details=details)


class EmptyResultError(ApplicationError):
    """Raised when a response carries no data where a list was expected."""

    def __init__(self, method_name: str, path: str, **kwargs: Any) -> None:
        message = f"No data found in {method_name} response (expected '{path}')"
        details = {"method_name": method_name, "path": path, **kwargs.pop("details", {})}
        super().__init__(message, error_code="EMPTY_RESULT", details=details)
