"""
Typed exception hierarchy for the tooling procurement core.

Every error carries a class-level ``code`` (machine-readable, API-safe) and
its context as attributes, so callers catch by type and report by field
instead of parsing messages.

    ToolingError (base)
    |
    +-- ValidationError                 missing/invalid input, blocks the action
    |   +-- RequisitionValidationError
    |   +-- QuotationIncompleteError
    |   +-- MissingCommentsError
    |   +-- MissingRemarksError
    |   +-- InvalidQuantityError
    |
    +-- PreconditionError               action attempted outside its legal state
    |   +-- InvalidTransitionError
    |   +-- AwardNotAllowedError
    |   +-- HandoverAlreadyExistsError
    |   +-- ConfirmationRequiredError
    |   +-- RequestNotEditableError
    |
    +-- AuthorizationError
    |   +-- UnauthorizedActorError
    |
    +-- LookupMissError                 referenced record does not exist
    |   +-- ProjectNotFoundError
    |   +-- RequisitionNotFoundError
    |   +-- SupplierNotFoundError
    |   +-- QuotationNotFoundError
    |   +-- InventoryItemNotFoundError
    |   +-- HandoverNotFoundError
    |   +-- SparesRequestNotFoundError
    |
    +-- InventoryError
        +-- DuplicateInventoryItemError
        +-- InsufficientStockError

Unknown BOM tool numbers are NOT errors: the resolver returns an empty
result and callers fall back to manual item entry.
"""

from __future__ import annotations


class ToolingError(Exception):
    """Base exception for all tooling procurement errors."""

    code: str = "TOOLING_ERROR"


# Validation errors


class ValidationError(ToolingError):
    code: str = "VALIDATION_ERROR"


class RequisitionValidationError(ValidationError):
    """One or more submission rules failed; ``problems`` lists all of them."""

    code: str = "REQUISITION_INVALID"

    def __init__(self, problems: list[str]):
        self.problems = list(problems)
        super().__init__("Requisition is invalid: " + "; ".join(self.problems))


class QuotationIncompleteError(ValidationError):
    """A supplier quotation lacks prices, delivery date or delivery terms."""

    code: str = "QUOTATION_INCOMPLETE"

    def __init__(self, supplier: str, missing: list[str]):
        self.supplier = supplier
        self.missing = list(missing)
        super().__init__(
            f"Quotation from {supplier} is incomplete: {', '.join(self.missing)}"
        )


class MissingCommentsError(ValidationError):
    code: str = "COMMENTS_REQUIRED"

    def __init__(self, action: str):
        self.action = action
        super().__init__(f"Comments are required to {action}")


class MissingRemarksError(ValidationError):
    code: str = "REMARKS_REQUIRED"

    def __init__(self, action: str):
        self.action = action
        super().__init__(f"Remarks are required to {action}")


class InvalidQuantityError(ValidationError):
    code: str = "INVALID_QUANTITY"

    def __init__(self, quantity: int, reason: str):
        self.quantity = quantity
        self.reason = reason
        super().__init__(f"Invalid quantity {quantity}: {reason}")


# Precondition errors


class PreconditionError(ToolingError):
    code: str = "PRECONDITION_FAILED"


class InvalidTransitionError(PreconditionError):
    """No transition exists for (state, action) in the named workflow."""

    code: str = "INVALID_TRANSITION"

    def __init__(self, workflow: str, from_state: str, action: str):
        self.workflow = workflow
        self.from_state = from_state
        self.action = action
        super().__init__(
            f"Cannot {action} a {workflow} in status '{from_state}'"
        )


class AwardNotAllowedError(PreconditionError):
    code: str = "AWARD_NOT_ALLOWED"

    def __init__(self, pr_id: str, status: str, reason: str | None = None):
        self.pr_id = pr_id
        self.status = status
        self.reason = reason or f"status is '{status}'"
        super().__init__(f"Cannot award PR {pr_id}: {self.reason}")


class HandoverAlreadyExistsError(PreconditionError):
    code: str = "HANDOVER_EXISTS"

    def __init__(self, pr_id: str, handover_id: str):
        self.pr_id = pr_id
        self.handover_id = handover_id
        super().__init__(f"PR {pr_id} already has handover {handover_id}")


class ConfirmationRequiredError(PreconditionError):
    code: str = "CONFIRMATION_REQUIRED"

    def __init__(self, action: str):
        self.action = action
        super().__init__(f"Explicit confirmation is required to {action}")


class RequestNotEditableError(PreconditionError):
    code: str = "REQUEST_NOT_EDITABLE"

    def __init__(self, request_id: str, status: str):
        self.request_id = request_id
        self.status = status
        super().__init__(
            f"Spares request {request_id} cannot be changed in status '{status}'"
        )


# Authorization errors


class AuthorizationError(ToolingError):
    code: str = "AUTHORIZATION_ERROR"


class UnauthorizedActorError(AuthorizationError):
    code: str = "UNAUTHORIZED_ACTOR"

    def __init__(self, actor_id: str, role: str, action: str, allowed_roles: tuple[str, ...]):
        self.actor_id = actor_id
        self.role = role
        self.action = action
        self.allowed_roles = allowed_roles
        super().__init__(
            f"Actor {actor_id} with role {role} may not {action} "
            f"(allowed: {', '.join(allowed_roles)})"
        )


# Lookup misses


class LookupMissError(ToolingError):
    code: str = "NOT_FOUND"
    entity: str = "record"

    def __init__(self, entity_id: str):
        self.entity_id = str(entity_id)
        super().__init__(f"{self.entity} not found: {entity_id}")


class ProjectNotFoundError(LookupMissError):
    code: str = "PROJECT_NOT_FOUND"
    entity: str = "Project"


class RequisitionNotFoundError(LookupMissError):
    code: str = "PR_NOT_FOUND"
    entity: str = "Purchase requisition"


class SupplierNotFoundError(LookupMissError):
    code: str = "SUPPLIER_NOT_FOUND"
    entity: str = "Supplier"


class QuotationNotFoundError(LookupMissError):
    code: str = "QUOTATION_NOT_FOUND"
    entity: str = "Quotation"


class InventoryItemNotFoundError(LookupMissError):
    code: str = "INVENTORY_ITEM_NOT_FOUND"
    entity: str = "Inventory item"


class HandoverNotFoundError(LookupMissError):
    code: str = "HANDOVER_NOT_FOUND"
    entity: str = "Tool handover"


class SparesRequestNotFoundError(LookupMissError):
    code: str = "SPARES_REQUEST_NOT_FOUND"
    entity: str = "Spares request"


# Inventory errors


class InventoryError(ToolingError):
    code: str = "INVENTORY_ERROR"


class DuplicateInventoryItemError(InventoryError):
    code: str = "DUPLICATE_INVENTORY_ITEM"

    def __init__(self, part_number: str, tool_number: str, name: str):
        self.part_number = part_number
        self.tool_number = tool_number
        self.name = name
        super().__init__(
            f"Inventory item already exists for ({part_number}, {tool_number}, {name})"
        )


class InsufficientStockError(InventoryError):
    code: str = "INSUFFICIENT_STOCK"

    def __init__(self, item_id: str, available: int, requested: int):
        self.item_id = item_id
        self.available = available
        self.requested = requested
        super().__init__(
            f"Insufficient stock for {item_id}: available {available}, requested {requested}"
        )
