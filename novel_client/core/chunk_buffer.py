"""
串流分塊緩衝區

網路讀取的邊界是任意的：一行可能被切成數塊，一個多位元組UTF-8字元也可能
剛好跨越兩塊。ChunkBuffer 以增量解碼器處理位元組，只回傳完整的行，
不完整的尾段保留到下一次讀取。
"""

import codecs
from typing import List, Union


class ChunkBuffer:
    """累積解碼後的文字並切出完整的行"""

    def __init__(self, encoding: str = "utf-8"):
        self._decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
        self._buffer = ""

    @property
    def pending(self) -> str:
        """尚未構成完整行的尾段"""
        return self._buffer

    def feed(self, chunk: Union[bytes, str]) -> List[str]:
        """加入一個分塊，回傳本次可取出的完整行"""
        if isinstance(chunk, (bytes, bytearray)):
            text = self._decoder.decode(bytes(chunk))
        else:
            text = chunk
        if not text:
            return []

        self._buffer += text
        lines = self._buffer.split("\n")
        self._buffer = lines.pop()
        return [line.rstrip("\r") for line in lines]

    def flush(self) -> List[str]:
        """串流結束時取出剩餘內容"""
        self._buffer += self._decoder.decode(b"", final=True)
        remainder, self._buffer = self._buffer, ""
        if not remainder.strip():
            return []
        return [line.rstrip("\r") for line in remainder.split("\n")]
