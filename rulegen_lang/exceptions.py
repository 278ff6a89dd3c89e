class RulegenError(Exception):
    """Base exception for rule generation."""

    pass


class RuleSyntaxError(RulegenError):
    """Raised when rule text cannot be split or parsed."""

    pass


class SchemaError(RulegenError):
    """Raised when a rule disagrees with the op/block descriptors."""

    pass


class DeadRuleError(RulegenError):
    """Raised when an unconditional rule shadows the rules after it."""

    pass


class SuccessorError(RulegenError):
    pass


class UnresolvedTypeError(RulegenError):
    pass


class EmitError(RulegenError):
    """Raised when the assembled output unit is not valid Python."""

    pass
