"""
測試 utils.serialization 模組
"""

import unittest
import sys
import os
import json

# 添加專案根目錄到 Python 路徑
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..'))

from novel_client.utils.serialization import EnumEncoder, to_camel_case, to_wire_dict, safe_json_dumps
from novel_client.models import (
    ChapterBatchResult, GeneratedChapter, GenerationTask, NovelOutline, TaskStatus,
    parse_stream_event
)


class TestSerialization(unittest.TestCase):
    """測試序列化工具"""

    def test_to_camel_case(self):
        self.assertEqual(to_camel_case("failed_chapters"), "failedChapters")
        self.assertEqual(to_camel_case("id"), "id")
        self.assertEqual(to_camel_case("total_chapters"), "totalChapters")

    def test_chapter_batch_result(self):
        result = ChapterBatchResult(generated=[GeneratedChapter(1, "A")], failed_chapters=[2])
        self.assertEqual(to_wire_dict(result), {
            "generated": [{"chapter": 1, "title": "A"}],
            "failedChapters": [2],
        })

    def test_outline_round_trip_shape(self):
        data = {
            "totalChapters": 2, "targetWordCount": 1, "mainGoal": "g", "milestones": ["m"],
            "volumes": [{"title": "t", "startChapter": 1, "endChapter": 2, "goal": "", "conflict": "",
                         "climax": "", "chapters": [{"index": 1, "title": "a", "goal": "", "hook": ""}]}],
        }
        self.assertEqual(to_wire_dict(NovelOutline.from_dict(data)), data)

    def test_enum_values(self):
        wire = to_wire_dict(GenerationTask(id=1, status=TaskStatus.PAUSED))
        self.assertEqual(wire["status"], "paused")

    def test_event_raw_omitted(self):
        wire = to_wire_dict(parse_stream_event({"type": "error", "error": "x"}))
        self.assertNotIn("raw", wire)
        self.assertEqual(wire["type"], "error")
        self.assertEqual(wire["error"], "x")

    def test_none_and_plain_values(self):
        self.assertIsNone(to_wire_dict(None))
        self.assertEqual(to_wire_dict([1, "a"]), [1, "a"])

    def test_safe_json_dumps(self):
        text = safe_json_dumps({"status": TaskStatus.RUNNING, "title": "夜雨"})
        self.assertIn("夜雨", text)
        self.assertEqual(json.loads(text)["status"], "running")

    def test_enum_encoder_rejects_unknown(self):
        with self.assertRaises(TypeError):
            json.dumps({"x": object()}, cls=EnumEncoder)


if __name__ == '__main__':
    unittest.main()
