from typing import Iterable, List, Optional

from llm_router.domain.conversation import ConversationStore, Message


class InMemoryConversationStore(ConversationStore):
    """不落盘的对话记忆，用于测试或嵌入其他进程。"""

    def __init__(self, initial: Optional[Iterable[Message]] = None):
        self._messages: List[Message] = list(initial or [])

    @property
    def messages(self) -> List[Message]:
        return list(self._messages)

    def load(self) -> List[Message]:
        return list(self._messages)

    def append(self, message: Message) -> None:
        self._messages.append(message)
