"""
小說生成客戶端的工具模組
"""

from .decorators import log_execution
from .serialization import EnumEncoder, to_camel_case, to_wire_dict, safe_json_dumps

__all__ = ['log_execution', 'EnumEncoder', 'to_camel_case', 'to_wire_dict', 'safe_json_dumps']
