"""Base agent — abstract interface every dialog agent must implement."""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from anm_bot.models.chat import ChatState


@dataclass
class AgentResponse:
    """Value object returned by an agent after processing a message.

    An empty ``reply_text`` means the bot stays silent.  ``handoff_topic``
    is set only on the turn that hands the chat over to a human.
    """

    reply_text: str = ""
    handoff_topic: str | None = None

    @property
    def is_silent(self) -> bool:
        return not self.reply_text


class BaseAgent(ABC):
    """Abstract base class for all conversational agents.

    Every agent receives the raw message text and the correspondent's
    ``ChatState``.  It moves the chat to its next stage and returns the
    reply to send back.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable agent name (used in logs)."""

    @abstractmethod
    async def greet(self, chat: ChatState) -> AgentResponse:
        """Open the dialog for a correspondent seen for the first time."""

    @abstractmethod
    async def handle(self, message: str, chat: ChatState) -> AgentResponse:
        """Process a user message and return a response.

        Parameters
        ----------
        message:
            The raw text the user sent.
        chat:
            Mutable dialog state for this correspondent.  Agents update
            its stage in place.
        """
