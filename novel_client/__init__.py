"""
小說生成串流客戶端主模組
"""

from .models import *
from .core import *
from .services import *
from .utils import *

# 命令列介面在需要時再導入，因為需要click
# from .cli import main

__version__ = "1.0.0"
