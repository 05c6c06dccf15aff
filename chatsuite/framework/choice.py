from typing import Optional

from pydantic import BaseModel, ConfigDict

from chatsuite.framework.message import Message


class Choice(BaseModel):
    model_config = ConfigDict(frozen=True)

    index: int
    message: Message
    finish_reason: Optional[str] = None  # str for flexibility across providers
