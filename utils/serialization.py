from __future__ import annotations

import json
from typing import Any, Optional


def to_jsonable(value: Any) -> Any:
    # Absent optional fields (a task without a tag) are left out of the document.
    if hasattr(value, "model_dump"):
        return value.model_dump(mode="json", exclude_none=True)
    if isinstance(value, list):
        return [to_jsonable(item) for item in value]
    if isinstance(value, dict):
        return {str(k): to_jsonable(v) for k, v in value.items()}
    return value


def dumps_json(value: Any, indent: Optional[int] = None) -> str:
    return json.dumps(to_jsonable(value), ensure_ascii=False, indent=indent, default=str)
