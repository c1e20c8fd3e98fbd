"""
Message table and translator.

Every user-facing string is looked up by key and rendered with named
placeholders such as ``{label}``, ``{field}``, ``{value}`` and
``{newValue}``. Do not change or remove keys, the lifecycle core relies on
them.
"""

from typing import Any, Dict, Mapping, Optional

import structlog

logger = structlog.get_logger()

MESSAGES: Dict[str, Dict[str, str]] = {
    "en": {
        # General
        "success": "Success.",
        "badRequest": "Bad Request.",
        "emptyParams": 'At least one input must be provided except "id" to update data.',
        "dataNotFound": "Data not found.",
        "exceptionOccured": "An exception has occurred.",
        "unauthorizedAccess": "Unauthorized access.",
        "serverError": "Server error.",
        "lockVersionOutdated": "The data being updated is outdated. Please refresh the page and try again.",
        "unknownError": "An unknown error occurred.",
        # Records
        "createRecordSuccess": "Data has been saved successfully.",
        "createRecordFailed": "Failed to save data.",
        "updateRecordSuccess": "Data has been updated successfully.",
        "updateRecordFailed": "Failed to update data.",
        "deleteRecordSuccess": "Data has been deleted successfully.",
        "deleteRecordFailed": "Failed to delete data.",
        "viewRecordSuccess": "Success.",
        "noRecordDeleted": "Failed, Record already deleted.",
        "noRecordUpdated": "Failed, no record updated.",
        # Field validation
        "required": "{label} cannot be blank.",
        "integer": "{label} must be an integer.",
        "array": "{label} must be an array.",
        "number": "{label} must be a number.",
        "string": "{label} must be a string.",
        "validationFailed": "Field validation failed.",
        "invalidField": "Field {label} not a valid request parameter.",
        "invalidValue": "{label} is invalid: {value}.",
        "fieldDataNotFound": "{label} data not found.",
        "extraField": "Extra field found in {label}: {field}. Allowed field: {value}.",
        "extraFieldFound": "Extra field found in {label}.",
        "missingField": "Missing required field: {field}.",
        "missingFieldFound": "Missing required field in {label}.",
        "nullField": "{label} field: {field} is cannot be null or empty.",
        "allowedField": "{field} can only contain the field {value}.",
        "integerNoZero": "{label} must be an integer and greater than 0.",
        # Pagination
        "pageMustBeGreaterThanZero": "Page must be greater than 0.",
        "invalidSortDir": "Sort direction must be one of: {value}.",
        "invalidSortBy": "Cannot sort by {value}.",
        # Status
        "invalidStatus": "{label} is invalid.",
        "invalidStatusTransition": "Status transition is not allowed.",
        "disallowedStatusUpdate": "Cannot change status because data already {value}.",
        "cannotChangeStatus": "Cannot change status from {value} to {newValue}.",
        "deletedStatusChanged": "You do not have permission to change the status from {value} to another status. Admin rights are required.",
        # Permissions
        "superadminOnly": "You do not have permission to perform this action.",
        "resyncSuccess": "Mirror resynchronized.",
        "updatePermission": "You do not have permission to update the {label} of this {tableName} because it is referenced in other data.",
    },
}


class _Placeholders(dict):
    """Leave unknown placeholders in place instead of failing."""

    def __missing__(self, key: str) -> str:
        return "{" + key + "}"


class Translator:
    """Resolve message keys for a language, falling back to the default."""

    def __init__(
        self,
        language: str = "en",
        default_language: str = "en",
        messages: Optional[Mapping[str, Mapping[str, str]]] = None,
    ):
        self.messages = messages if messages is not None else MESSAGES
        self.default_language = default_language
        self.language = language if language in self.messages else default_language

    def t(self, key: str, **params: Any) -> str:
        """Translate ``key`` and substitute named placeholders."""
        table = self.messages.get(self.language, {})
        template = table.get(key)
        if template is None:
            template = self.messages.get(self.default_language, {}).get(key)
        if template is None:
            logger.warning("Missing translation key", key=key, language=self.language)
            return key
        return template.format_map(_Placeholders({k: str(v) for k, v in params.items()}))

    __call__ = t
