"""Reasoning oracle: the black-box collaborator that proposes a candidate signal."""

from __future__ import annotations

from abc import ABC, abstractmethod
import logging
from typing import Optional

from signal_arena.decision.llm_client import LLMClient
from signal_arena.decision.models import OracleProposal
from signal_arena.decision.prompt_builder import PromptBundle
from signal_arena.errors import SignalGenerationFailed

logger = logging.getLogger(__name__)


class ReasoningOracle(ABC):
    @abstractmethod
    def propose(self, prompt: PromptBundle) -> OracleProposal:
        """Return a candidate signal with its reasoning.

        Raises SignalGenerationFailed when no usable proposal is produced.
        """
        raise NotImplementedError


class LLMReasoningOracle(ReasoningOracle):
    """Oracle backed by an OpenAI-compatible chat model."""

    def __init__(self, llm_client: Optional[LLMClient] = None) -> None:
        self._llm_client = llm_client

    @property
    def llm_client(self) -> LLMClient:
        if self._llm_client is None:
            self._llm_client = LLMClient()
        return self._llm_client

    def propose(self, prompt: PromptBundle) -> OracleProposal:
        try:
            proposal, raw = self.llm_client.chat_json(prompt.system, prompt.user, OracleProposal)
        except Exception as exc:
            logger.error("Oracle request failed: %s", exc)
            raise SignalGenerationFailed("Failed to generate trading signal from AI") from exc
        logger.debug("Oracle response: %s", raw)
        return proposal
