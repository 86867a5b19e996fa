"""
Ability Registry Module

This module publishes abilities (named, schema-typed, permission-gated
operations) and dispatches invocations to their handlers. Every invocation
goes through the same steps: permission check, input validation with
defaults, handler, output validation. Failures come back as structured
error values instead of exceptions so one bad call never takes the host
process down.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, FrozenSet, Iterable, List, Optional, Union

from utils.exceptions import (
    AbilityError, AbilityNotFoundError, ContentStrategistError, DatabaseError,
    InvalidInputError, InvalidOutputError, PermissionDeniedError
)
from utils.logger import get_logger

logger = get_logger(__name__)

_JSON_TYPES = {
    "integer": int,
    "number": (int, float),
    "string": str,
    "boolean": bool,
    "array": list,
    "object": dict,
}


@dataclass(frozen=True)
class User:
    """The caller an ability runs on behalf of."""
    login: str
    capabilities: FrozenSet[str] = frozenset()

    @classmethod
    def with_capabilities(cls, login: str, capabilities: Iterable[str]) -> "User":
        return cls(login=login, capabilities=frozenset(capabilities))

    def can(self, capability: str) -> bool:
        return capability in self.capabilities


def require_capability(capability: str) -> Callable[[Optional[User]], bool]:
    """
    Build a permission predicate that passes when the caller holds `capability`.

    One predicate instance is shared by every ability that needs the same capability.
    """
    def permission_callback(user: Optional[User]) -> bool:
        return user is not None and user.can(capability)

    permission_callback.capability = capability
    return permission_callback


@dataclass(frozen=True)
class AbilityCategory:
    """A grouping abilities are filed under."""
    slug: str
    label: str
    description: str = ""


@dataclass(frozen=True)
class Ability:
    """A registered ability and everything needed to publish and invoke it."""
    name: str
    label: str
    description: str
    category: str
    input_schema: Dict[str, Any]
    output_schema: Dict[str, Any]
    execute_callback: Callable[..., Any]
    permission_callback: Callable[[Optional[User]], bool]
    meta: Dict[str, Any] = field(default_factory=dict)

    @property
    def show_in_rest(self) -> bool:
        return bool(self.meta.get("show_in_rest"))

    def to_dict(self) -> Dict[str, Any]:
        """Describe the ability for discovery (no callbacks)."""
        return {
            "name": self.name,
            "label": self.label,
            "description": self.description,
            "category": self.category,
            "input_schema": self.input_schema,
            "output_schema": self.output_schema,
            "meta": dict(self.meta),
        }


class AbilityRegistry:
    """Registry of ability categories and abilities."""

    def __init__(self):
        self._categories: Dict[str, AbilityCategory] = {}
        self._abilities: Dict[str, Ability] = {}

    def register_category(self, slug: str, label: str, description: str = "") -> AbilityCategory:
        if slug in self._categories:
            raise ValueError(f"Ability category already registered: {slug}")
        category = AbilityCategory(slug=slug, label=label, description=description)
        self._categories[slug] = category
        logger.debug(f"Registered ability category '{slug}'")
        return category

    def register(self, ability: Ability) -> Ability:
        """
        Register an ability.

        Raises:
            ValueError: If the name is taken or its category is not registered.
        """
        if ability.name in self._abilities:
            raise ValueError(f"Ability already registered: {ability.name}")
        if ability.category not in self._categories:
            raise ValueError(f"Unknown ability category '{ability.category}' for {ability.name}")
        self._abilities[ability.name] = ability
        logger.debug(f"Registered ability '{ability.name}'")
        return ability

    def get(self, name: str) -> Optional[Ability]:
        return self._abilities.get(name)

    def categories(self) -> List[AbilityCategory]:
        return list(self._categories.values())

    def list_abilities(self, show_in_rest_only: bool = False) -> List[Ability]:
        abilities = list(self._abilities.values())
        if show_in_rest_only:
            abilities = [ability for ability in abilities if ability.show_in_rest]
        return abilities

    def execute(self, name: str, input: Optional[Dict[str, Any]] = None,
                user: Optional[User] = None) -> Union[List[Any], Dict[str, Any]]:
        """
        Invoke an ability.

        Args:
            name: Fully qualified ability name.
            input: Ability input; None means all defaults.
            user: The caller, checked against the permission predicate.

        Returns:
            The handler result, or an error dictionary shaped
            {"code": ..., "message": ..., "data": {"status": ...}}.
        """
        try:
            ability = self._abilities.get(name)
            if ability is None:
                raise AbilityNotFoundError(f"Ability not found: {name}")

            if not ability.permission_callback(user):
                raise PermissionDeniedError(f"You are not allowed to execute {name}.")

            arguments = validate_input(ability.input_schema, input)
            result = ability.execute_callback(**arguments)
            validate_output(ability.output_schema, result)
            return result

        except AbilityError as e:
            logger.warning(f"Ability {name} failed: {e.code}: {e.message}")
            return e.to_dict()
        except DatabaseError as e:
            logger.error(f"Content store error in ability {name}: {e}", exc_info=True)
            return AbilityError("Could not read content from the site database.",
                                code="content_store_error", status=500).to_dict()
        except ContentStrategistError as e:
            logger.error(f"Error in ability {name}: {e}", exc_info=True)
            return AbilityError(str(e)).to_dict()
        except Exception as e:
            logger.error(f"Unexpected error in ability {name}: {e}", exc_info=True)
            return AbilityError("An unexpected error occurred.", code="internal_error", status=500).to_dict()


def is_error(result: Any) -> bool:
    """Return True when a registry result is an error value."""
    return isinstance(result, dict) and "code" in result and "message" in result


# =============================================================================
# Schema Validation
# =============================================================================

def _matches_type(value: Any, expected: str) -> bool:
    if expected in ("integer", "number") and isinstance(value, bool):
        return False
    python_type = _JSON_TYPES.get(expected)
    return python_type is None or isinstance(value, python_type)


def _coerce(value: Any, expected: Optional[str]) -> Any:
    # Transports may deliver integers as numeric strings or whole floats
    if expected == "integer":
        if isinstance(value, str):
            try:
                return int(value.strip())
            except ValueError:
                return value
        if isinstance(value, float) and value.is_integer():
            return int(value)
    return value


def _check_value(schema: Dict[str, Any], value: Any, path: str, error_cls) -> None:
    expected = schema.get("type")
    if expected and not _matches_type(value, expected):
        raise error_cls(f"{path} is not of type {expected}.")

    if "enum" in schema and value not in schema["enum"]:
        allowed = ", ".join(str(v) for v in schema["enum"])
        raise error_cls(f"{path} is not one of {allowed}.")
    if "minimum" in schema and value < schema["minimum"]:
        raise error_cls(f"{path} must be greater than or equal to {schema['minimum']}.")
    if "maximum" in schema and value > schema["maximum"]:
        raise error_cls(f"{path} must be less than or equal to {schema['maximum']}.")

    if expected == "array" and "items" in schema:
        for index, item in enumerate(value):
            _check_value(schema["items"], item, f"{path}[{index}]", error_cls)

    if expected == "object":
        for key, sub_schema in schema.get("properties", {}).items():
            if key in value:
                _check_value(sub_schema, value[key], f"{path}[{key}]", error_cls)


def validate_input(schema: Dict[str, Any], input: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Validate ability input and fill in defaults.

    Returns:
        The arguments to pass to the handler.

    Raises:
        InvalidInputError: If the input does not match the schema.
    """
    if input is None:
        input = {}
    if not isinstance(input, dict):
        raise InvalidInputError("Ability input must be an object.")

    properties = schema.get("properties", {})
    if schema.get("additionalProperties") is False:
        unknown = sorted(set(input) - set(properties))
        if unknown:
            raise InvalidInputError(f"Unexpected input properties: {', '.join(unknown)}.")

    arguments = {}
    for key, prop_schema in properties.items():
        if key in input:
            value = _coerce(input[key], prop_schema.get("type"))
        elif "default" in prop_schema:
            value = prop_schema["default"]
        elif key in schema.get("required", []):
            raise InvalidInputError(f"input[{key}] is a required property.")
        else:
            continue
        _check_value(prop_schema, value, f"input[{key}]", InvalidInputError)
        arguments[key] = value

    return arguments


def validate_output(schema: Dict[str, Any], result: Any) -> None:
    """
    Validate a handler result against the ability's output schema.

    Raises:
        InvalidOutputError: If the result does not match the schema.
    """
    _check_value(schema, result, "output", InvalidOutputError)
