from .abilities import ability_modifier, derive_abilities
from .advantages import aggregate_advantages, build_style
from .choices import evaluate_fulfillment, select_choice
from .references import resolve_references
from .rules_engine import RulesEngine
from .traits import collect_traits, reconcile_trait_choices

__all__ = [
    "RulesEngine",
    "ability_modifier",
    "aggregate_advantages",
    "build_style",
    "collect_traits",
    "derive_abilities",
    "evaluate_fulfillment",
    "reconcile_trait_choices",
    "resolve_references",
    "select_choice",
]
