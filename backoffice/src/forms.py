"""
Draft/commit controller shared by every create and edit form.

A `Draft` holds a snapshot of an entity (empty on create) plus the edits
staged on top of it. Nothing is persisted here: `commit()` only returns a
validated candidate, and the caller decides what to do with it.

Form models derive from `EntityForm`. Field-level rules are declared with
pydantic constraints; rules spanning several fields or needing reference
data (e.g. the stations a staff member may be assigned to) go in
`crossCheck`, which reports errors per field.
"""

from typing import Any, Dict, Optional, Type
from pydantic import BaseModel, ConfigDict, ValidationError, model_validator

from backoffice.src import exceptions


class EntityForm(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    @model_validator(mode="before")
    @classmethod
    def blankToNone(cls, data: Any) -> Any:
        # Empty inputs of optional fields mean "not provided"
        if not isinstance(data, dict):
            return data
        cleaned = {}
        for key, value in data.items():
            field = cls.model_fields.get(key)
            blank = isinstance(value, str) and not value.strip()
            if blank and field is not None and field.default is None:
                value = None
            cleaned[key] = value
        return cleaned

    def crossCheck(self, references: dict) -> Dict[str, str]:
        return {}


def formatErrors(e: ValidationError) -> Dict[str, str]:
    """Map a pydantic error list to one message per field (first error wins)."""
    errors = {}
    for error in e.errors():
        field = ".".join(str(part) for part in error["loc"]) or "__root__"
        errors.setdefault(field, error["msg"])
    return errors


class Draft:
    """
    In-progress create or edit of an entity.

    Args:
        form (Type[EntityForm]): Form model validating the complete entity.
        entity: Existing entity (ORM object or mapping) for an edit, `None` for a create.
        references (dict): Reference data used by `crossCheck`
            (e.g. `{"station_ids": {1, 2}}`).

    Example:
        >>> draft = Draft(StationForm, station, {"company_id": 1})
        >>> draft.stage(name="Gare Nord")
        >>> candidate = draft.commit()  # raises InvalidForm when invalid
    """

    def __init__(
        self,
        form: Type[EntityForm],
        entity: Any = None,
        references: Optional[dict] = None,
    ):
        self.form = form
        self.references = references or {}
        self.original = self._snapshot(entity)
        self.changes: Dict[str, Any] = {}

    def _snapshot(self, entity: Any) -> Dict[str, Any]:
        if entity is None:
            return {}
        snapshot = {}
        for field in self.form.model_fields:
            if isinstance(entity, dict):
                if field in entity:
                    snapshot[field] = entity[field]
            elif hasattr(entity, field):
                snapshot[field] = getattr(entity, field)
        return snapshot

    @property
    def isCreate(self) -> bool:
        return not self.original

    def stage(self, **fields) -> None:
        for field, value in fields.items():
            if field not in self.form.model_fields:
                continue
            if field in self.original and self.original[field] == value:
                self.changes.pop(field, None)
            else:
                self.changes[field] = value

    def isDirty(self) -> bool:
        return bool(self.changes)

    def data(self) -> Dict[str, Any]:
        return {**self.original, **self.changes}

    def _validate(self):
        try:
            candidate = self.form.model_validate(self.data())
        except ValidationError as e:
            return None, formatErrors(e)
        return candidate, candidate.crossCheck(self.references)

    def errors(self) -> Dict[str, str]:
        _, errors = self._validate()
        return errors

    def isValid(self) -> bool:
        return not self.errors()

    def commit(self) -> EntityForm:
        """
        Validate the draft and return the candidate entity.

        Raises:
            exceptions.InvalidForm: With a `{field: message}` detail when any
                rule fails. The draft and the stored entity are left untouched.
        """
        candidate, errors = self._validate()
        if errors:
            raise exceptions.InvalidForm(errors)
        return candidate
