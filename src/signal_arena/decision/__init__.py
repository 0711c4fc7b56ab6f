"""Decision layer exports."""

from signal_arena.decision.engine import SignalEngine
from signal_arena.decision.llm_client import LLMClient
from signal_arena.decision.oracle import LLMReasoningOracle, ReasoningOracle
from signal_arena.decision.prompt_builder import PromptBuilder
from signal_arena.decision.scanner import OpportunityScanner
from signal_arena.decision.synthesizer import SignalSynthesizer

__all__ = [
    "LLMClient",
    "LLMReasoningOracle",
    "OpportunityScanner",
    "PromptBuilder",
    "ReasoningOracle",
    "SignalEngine",
    "SignalSynthesizer",
]
