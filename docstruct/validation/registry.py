import logging

from docstruct.validation.rules import ValidationRule

logger = logging.getLogger(__name__)


class RuleRegistry:
    """Ordered, per-validator collection of named validation rules.

    Registering an existing name replaces the rule but keeps its position.
    """

    def __init__(self) -> None:
        self._rules: dict[str, ValidationRule] = {}

    def register(self, name: str, rule: ValidationRule) -> None:
        if name in self._rules:
            logger.debug("Replacing rule: %s", name)
        else:
            logger.debug("Registered rule: %s", name)
        self._rules[name] = rule

    def unregister(self, name: str) -> bool:
        """Remove a rule. Returns False when no rule had that name."""
        if self._rules.pop(name, None) is None:
            logger.debug("Cannot remove rule, not found: %s", name)
            return False
        logger.debug("Removed rule: %s", name)
        return True

    def get(self, name: str) -> ValidationRule:
        try:
            return self._rules[name]
        except KeyError:
            logger.error("Rule not found: %s", name)
            raise KeyError(f"Rule '{name}' not found")

    def names(self) -> list[str]:
        return list(self._rules)

    def rules(self) -> list[tuple[str, ValidationRule]]:
        return list(self._rules.items())

    def __contains__(self, name: object) -> bool:
        return name in self._rules

    def __len__(self) -> int:
        return len(self._rules)
