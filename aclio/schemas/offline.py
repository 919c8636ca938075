# aclio/schemas/offline.py
import base64
import json
import uuid
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator
from pydantic.alias_generators import to_camel


class OfflineOperationType(str, Enum):
    CREATE_GOAL = "createGoal"
    UPDATE_GOAL = "updateGoal"
    DELETE_GOAL = "deleteGoal"
    TOGGLE_STEP = "toggleStep"
    EXTEND_GOAL = "extendGoal"


class OfflineOperation(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    type: OfflineOperationType
    payload: bytes = b""
    created_at: datetime = Field(default_factory=datetime.now)
    retry_count: int = 0

    @classmethod
    def with_json_payload(cls, op_type: OfflineOperationType, data: Any) -> "OfflineOperation":
        return cls(type=op_type, payload=json.dumps(data).encode("utf-8"))

    def payload_json(self) -> Any:
        return json.loads(self.payload.decode("utf-8")) if self.payload else None

    # Payload is opaque; it travels as base64 text in storage
    @field_serializer("payload")
    def _encode_payload(self, payload: bytes) -> str:
        return base64.b64encode(payload).decode("ascii")

    @field_validator("payload", mode="before")
    @classmethod
    def _decode_payload(cls, value: Any) -> Any:
        if isinstance(value, str):
            return base64.b64decode(value)
        return value
