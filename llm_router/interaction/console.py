"""人类插话通道。

每轮 builder/judge 结束后阻塞读取一行输入：
- 去掉首尾空白后非空：返回一条新的 user 消息；
- 空行或只有空白：返回 None，两个 Agent 继续自主对话；
- stdin 关闭（EOF）：抛出 InputClosed，由编排器结束会话。
"""

from typing import Callable, Optional, Protocol

from llm_router.domain.conversation import Message


DEFAULT_PROMPT = "Your follow-up (or press Enter to continue): "


class InputClosed(Exception):
    """交互输入已关闭，无法再读取插话。"""


class InterjectionChannel(Protocol):
    def read(self) -> Optional[Message]:
        ...


def parse_interjection(line: Optional[str]) -> Optional[Message]:
    text = (line or "").strip()
    if not text:
        return None
    return Message(role="user", content=text)


class ConsoleInterjectionChannel:
    def __init__(self, input_fn: Callable[[str], str] = input, prompt: str = DEFAULT_PROMPT):
        self._input = input_fn
        self._prompt = prompt

    def read(self) -> Optional[Message]:
        try:
            line = self._input(self._prompt)
        except EOFError:
            raise InputClosed()
        return parse_interjection(line)
