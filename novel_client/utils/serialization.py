"""
序列化工具模組
把結果數據類轉回伺服器使用的camelCase格式，並處理枚舉類型
"""

import json
from dataclasses import asdict, is_dataclass
from enum import Enum
from typing import Any


class EnumEncoder(json.JSONEncoder):
    """支持枚舉序列化的JSON編碼器"""

    def default(self, obj):
        if isinstance(obj, Enum):
            return obj.value
        return super().default(obj)


def to_camel_case(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


def to_wire_dict(obj: Any) -> Any:
    """遞歸轉換為camelCase字典，dataclass以外的值原樣保留"""
    if is_dataclass(obj) and not isinstance(obj, type):
        obj = asdict(obj)
    if isinstance(obj, dict):
        # 事件的原始內容不重複輸出
        return {to_camel_case(key): to_wire_dict(value) for key, value in obj.items() if key != "raw"}
    if isinstance(obj, (list, tuple)):
        return [to_wire_dict(item) for item in obj]
    if isinstance(obj, Enum):
        return obj.value
    return obj


def safe_json_dumps(data: Any, **kwargs) -> str:
    """安全地進行JSON字符串序列化，支持枚舉類型"""
    default_kwargs = {
        'ensure_ascii': False,
        'indent': 2,
        'cls': EnumEncoder
    }
    default_kwargs.update(kwargs)

    return json.dumps(data, **default_kwargs)
