from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, StrictStr


class TelemetryEventRequest(BaseModel):
    model_config = ConfigDict(extra='allow')

    event: StrictStr
    properties: Optional[dict[str, Any]] = None
    ts: Optional[str] = None
