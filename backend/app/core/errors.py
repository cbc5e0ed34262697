"""Domain error taxonomy for InvoiceFlow.

Services raise these exceptions; ``backend.app.main`` maps each class to an
HTTP status so callers can tell validation, not-found, ownership and
document-generation failures apart.
"""

from typing import Any, Dict, List, Optional


class InvoiceFlowError(Exception):
    status_code = 500

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class InvoiceValidationError(InvoiceFlowError):
    """Input failed validation before any write was attempted."""

    status_code = 400

    def __init__(self, detail: str = "Validation error", errors: Optional[List[Dict[str, Any]]] = None):
        super().__init__(detail)
        self.errors = errors or []

    @classmethod
    def for_field(cls, loc: List[Any], msg: str) -> "InvoiceValidationError":
        return cls(errors=[{"loc": loc, "msg": msg}])


class ResourceNotFoundError(InvoiceFlowError):
    status_code = 404

    def __init__(self, resource: str):
        super().__init__(f"{resource} not found")
        self.resource = resource


class OwnershipError(InvoiceFlowError):
    status_code = 403

    def __init__(self, resource: str):
        super().__init__("Unauthorized")
        self.resource = resource


class RelationResolutionError(InvoiceFlowError):
    """A document could not be built because a joined record is missing."""

    status_code = 422

    def __init__(self, relation: str):
        super().__init__(f"Cannot generate document: {relation} could not be resolved")
        self.relation = relation


class StorageError(InvoiceFlowError):
    status_code = 500

    def __init__(self, detail: str = "Unexpected storage failure"):
        super().__init__(detail)
