from dataclasses import dataclass
from typing import Any, Dict, List, Literal, Protocol


MessageRole = Literal["user", "assistant"]
MESSAGE_ROLES = ("user", "assistant")


@dataclass(frozen=True)
class Message:
    """对话记忆中的一条消息：user 表示人类，assistant 表示模型。"""

    role: MessageRole
    content: str

    def to_dict(self) -> Dict[str, Any]:
        return {"role": self.role, "content": self.content}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Message":
        role = data.get("role")
        content = data.get("content")
        if role not in MESSAGE_ROLES:
            raise ValueError(f"invalid role: {role!r}")
        if not isinstance(content, str):
            raise ValueError("content must be a string")
        return cls(role=role, content=content)


class ConversationStore(Protocol):
    """只追加的对话记忆。

    load() 在存储不存在时创建并持久化一个空日志；
    append() 每次都同步落盘，失败时抛出 PersistenceError。
    """

    def load(self) -> List[Message]:
        ...

    def append(self, message: Message) -> None:
        ...

    @property
    def messages(self) -> List[Message]:
        ...
