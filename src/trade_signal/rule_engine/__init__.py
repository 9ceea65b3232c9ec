"""Signal decision engine."""

from trade_signal.rule_engine.engine import (
    DEFAULT_RULES,
    NO_SIGNAL_REASON,
    DecisionFn,
    Rule,
    SignalEngine,
    analyze,
    bias_rule,
    breakout_rule,
    crossover_rule,
    decide,
    pullback_rule,
    volatility_gate,
)
from trade_signal.rule_engine.models import (
    Action,
    AnalysisResult,
    OutcomeKind,
    RuleOutcome,
    SignalContext,
    StrategyDecision,
)

__all__ = [
    "Action",
    "AnalysisResult",
    "DEFAULT_RULES",
    "DecisionFn",
    "NO_SIGNAL_REASON",
    "OutcomeKind",
    "Rule",
    "RuleOutcome",
    "SignalContext",
    "SignalEngine",
    "StrategyDecision",
    "analyze",
    "bias_rule",
    "breakout_rule",
    "crossover_rule",
    "decide",
    "pullback_rule",
    "volatility_gate",
]
