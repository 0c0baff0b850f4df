"""
Conversation History - bounded window of recent exchanges.

Pure memory buffer: stores (user, bot) turns and renders them as the
"User: ..." / "Bot: ..." lines handed to a generative fallback as context.
Oldest exchanges are evicted first once the window is full.
"""

from collections import deque
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

USER_PREFIX = "User: "
BOT_PREFIX = "Bot: "


@dataclass
class ConversationTurn:
    """A single exchange in the conversation"""
    timestamp: datetime
    user_input: str
    bot_response: str
    satisfaction: Optional[float] = None


class ConversationHistory:
    """
    Sliding window of recent turns.

    ``max_turns`` exchanges are kept, i.e. at most ``2 * max_turns`` lines.
    """

    def __init__(self, max_turns: int = 10):
        """
        Args:
            max_turns: Maximum number of exchanges to keep
        """
        if max_turns < 1:
            raise ValueError(f"max_turns must be positive, got {max_turns}")
        self.max_turns = max_turns
        self.turns = deque(maxlen=max_turns)

    def add_turn(
        self,
        user_input: str,
        bot_response: str,
        satisfaction: Optional[float] = None,
    ) -> ConversationTurn:
        turn = ConversationTurn(
            timestamp=datetime.now(),
            user_input=user_input,
            bot_response=bot_response,
            satisfaction=satisfaction,
        )
        self.turns.append(turn)
        return turn

    def get_recent_turns(self, n: int = 5) -> List[ConversationTurn]:
        """
        Get the N most recent turns (newest last).
        """
        if n <= 0:
            return []
        return list(self.turns)[-n:]

    def lines(self) -> List[str]:
        """Flattened history, two lines per exchange, oldest first."""
        lines = []
        for turn in self.turns:
            lines.append(f"{USER_PREFIX}{turn.user_input}")
            lines.append(f"{BOT_PREFIX}{turn.bot_response}")
        return lines

    def clear(self):
        """Clear all conversation history"""
        self.turns.clear()

    def __len__(self) -> int:
        return len(self.turns)
