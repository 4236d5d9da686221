import json
import os
from pathlib import Path
from typing import List, Optional
from uuid import uuid4

from llm_router.config.settings import settings
from llm_router.domain.conversation import ConversationStore, Message
from llm_router.domain.exceptions import PersistenceError, StoreError
from llm_router.infrastructure.logging.logger import logger


class JsonConversationStore(ConversationStore):
    """把整段对话记忆保存为一个 JSON 数组文件。

    每次 append 都整体重写：先写临时文件再 os.replace，
    保证任何时刻读到的都是一份完整可解析的数组。
    """

    def __init__(self, path: str | Path | None = None):
        self._path = Path(path or settings.memory_path).expanduser().resolve()
        self._messages: Optional[List[Message]] = None

    @property
    def path(self) -> Path:
        return self._path

    @property
    def messages(self) -> List[Message]:
        if self._messages is None:
            self.load()
        return list(self._messages or [])

    def load(self) -> List[Message]:
        if not self._path.exists():
            try:
                self._write([])
            except PersistenceError as e:
                raise StoreError(code="STORE_CREATE_ERROR", message=e.message, path=str(self._path))
            logger.info("Created empty memory store", extra={"extra": {"path": str(self._path)}})
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise StoreError(code="STORE_READ_ERROR", message=f"{self._path}: {e}", path=str(self._path))
        if not isinstance(data, list):
            raise StoreError(
                code="STORE_READ_ERROR",
                message=f"{self._path}: expected a JSON array of messages",
                path=str(self._path),
            )
        messages: List[Message] = []
        for idx, item in enumerate(data):
            if not isinstance(item, dict):
                raise StoreError(
                    code="STORE_READ_ERROR",
                    message=f"{self._path}: entry {idx} is not an object",
                    path=str(self._path),
                )
            try:
                messages.append(Message.from_dict(item))
            except ValueError as e:
                raise StoreError(
                    code="STORE_READ_ERROR",
                    message=f"{self._path}: entry {idx}: {e}",
                    path=str(self._path),
                )
        self._messages = messages
        return list(messages)

    def append(self, message: Message) -> None:
        current = self.messages
        current.append(message)
        self._write(current)
        self._messages = current

    def _write(self, messages: List[Message]) -> None:
        tmp_path = self._path.parent / f"{self._path.name}.{uuid4().hex}.tmp"
        payload = json.dumps([m.to_dict() for m in messages], ensure_ascii=False, indent=2)
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(payload, encoding="utf-8")
            os.replace(tmp_path, self._path)
        except (OSError, UnicodeError) as e:
            # 孤立代理项等无法编码的内容同样算写入失败，临时文件不保留
            tmp_path.unlink(missing_ok=True)
            raise PersistenceError(code="STORE_WRITE_ERROR", message=str(e), path=str(self._path))
