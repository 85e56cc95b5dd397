"""
測試 core.stream_session 模組
"""

import unittest
import sys
import os
from unittest.mock import Mock

# 添加專案根目錄到 Python 路徑
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..'))

from novel_client.core.stream_session import StreamSession
from novel_client.core.reconciler import OutlineReconciler, ChapterBatchReconciler
from novel_client.models import (
    GenerationKind, StreamEventType, ChapterBatchResult, GeneratedChapter, NovelOutline,
    GenerationFailedException, NoTerminalEventException, StreamAbortedException
)

CHAPTER_BODY = (
    'data: {"type":"start","total":2}\n\n'
    'data: {"type":"heartbeat"}\n\n'
    'data: {"type":"progress","message":"正在生成第 1 章"}\n\n'
    'data: {"type":"chapter_complete","chapterIndex":1,"title":"第一章「夜雨」"}\n\n'
    'data: {"type":"chapter_complete","chapterIndex":2,"title":"第二章"}\n\n'
    'data: {"type":"done","success":true,"generated":[{"chapter":1,"title":"第一章「夜雨」"},'
    '{"chapter":2,"title":"第二章"}],"failedChapters":[]}\n\n'
).encode("utf-8")


def run_chunks(chunks, kind=GenerationKind.CHAPTERS):
    session = StreamSession.for_kind(kind)
    for chunk in chunks:
        session.feed(chunk)
    return session.finish()


class TestStreamSession(unittest.TestCase):
    """測試串流會話"""

    def test_for_kind(self):
        self.assertIsInstance(StreamSession.for_kind(GenerationKind.OUTLINE).reconciler, OutlineReconciler)
        session = StreamSession.for_kind(GenerationKind.CHAPTERS)
        self.assertIsInstance(session.reconciler, ChapterBatchReconciler)
        self.assertIs(session.kind, GenerationKind.CHAPTERS)

    def test_sessions_do_not_share_state(self):
        first = StreamSession.for_kind(GenerationKind.CHAPTERS)
        second = StreamSession.for_kind(GenerationKind.CHAPTERS)
        first.feed(b'data: {"type":"chapter_complete"')
        self.assertIsNot(first.buffer, second.buffer)
        self.assertEqual(second.buffer.pending, "")

    def test_split_json_record(self):
        """JSON記錄被切成兩塊時仍得到一個事件"""
        callback = Mock()
        session = StreamSession.for_kind(GenerationKind.OUTLINE, callback)
        session.feed('data: {"typ'.encode("utf-8"))
        session.feed('e":"progress","message":"准备中"}\n'.encode("utf-8"))

        self.assertEqual(callback.call_count, 1)
        event = callback.call_args[0][0]
        self.assertIs(event.type, StreamEventType.PROGRESS)
        self.assertEqual(event.message, "准备中")

    def test_chapter_scenario(self):
        result = run_chunks([
            b'data:{"type":"chapter_complete","chapterIndex":1,"title":"A"}\n',
            b'data:{"type":"done","success":true,"generated":[{"chapter":1,"title":"A"}],"failedChapters":[]}\n',
        ])
        self.assertEqual(result, ChapterBatchResult(generated=[GeneratedChapter(1, "A")], failed_chapters=[]))

    def test_error_scenario(self):
        with self.assertRaises(GenerationFailedException) as context:
            run_chunks([
                b'data:{"type":"progress","message":"x"}\n',
                b'data:{"type":"error","error":"quota exceeded"}\n',
            ])
        self.assertEqual(str(context.exception), "quota exceeded")

    def test_fragmentation_invariance(self):
        """任意兩個切點的分塊方式都得到與整塊相同的結果"""
        expected = run_chunks([CHAPTER_BODY])
        self.assertEqual(len(expected.generated), 2)

        length = len(CHAPTER_BODY)
        for first in range(0, length, 7):
            for second in range(first, length, 13):
                chunks = [CHAPTER_BODY[:first], CHAPTER_BODY[first:second], CHAPTER_BODY[second:]]
                self.assertEqual(run_chunks(chunks), expected)

    def test_single_byte_chunks(self):
        chunks = [CHAPTER_BODY[i:i + 1] for i in range(len(CHAPTER_BODY))]
        self.assertEqual(run_chunks(chunks), run_chunks([CHAPTER_BODY]))

    def test_corrupt_line_between_valid_lines(self):
        """損壞的行不影響前後的事件"""
        callback = Mock()
        session = StreamSession.for_kind(GenerationKind.CHAPTERS, callback)
        with self.assertLogs("novel_client.core.event_decoder", level="WARNING"):
            session.feed(
                b'data: {"type":"chapter_complete","chapterIndex":1,"title":"A"}\n'
                b'data: {"type":"chapter_compl\n'
                b'data: {"type":"done","success":true}\n'
            )
        self.assertEqual(callback.call_count, 2)
        self.assertEqual(session.finish().generated, [GeneratedChapter(1, "A")])

    def test_trailing_fragment_flushed(self):
        """最後一行沒有換行時在結束時處理"""
        result = run_chunks([b'data: {"type":"done","success":true}'])
        self.assertEqual(result, ChapterBatchResult())

    def test_no_terminal_event(self):
        with self.assertRaises(NoTerminalEventException):
            run_chunks([b'data: {"type":"start"}\n\n', b'data: {"type":"heartbeat"}\n\n'])

    def test_feed_text_counts_events(self):
        session = StreamSession.for_kind(GenerationKind.CHAPTERS)
        self.assertEqual(session.feed_text(CHAPTER_BODY.decode("utf-8")), 6)
        self.assertEqual(session.feed_text("not an event"), 0)


class TestApplyEnvelope(unittest.TestCase):
    """測試整體JSON回應的處理"""

    def test_typed_object_is_event(self):
        session = StreamSession.for_kind(GenerationKind.CHAPTERS)
        session.apply_envelope({"type": "done", "success": True, "generated": [{"chapter": 5, "title": "E"}]})
        self.assertEqual(session.finish().generated, [GeneratedChapter(5, "E")])

    def test_failure_envelope(self):
        session = StreamSession.for_kind(GenerationKind.OUTLINE)
        with self.assertRaises(GenerationFailedException) as context:
            session.apply_envelope({"success": False, "error": "Unauthorized"})
        self.assertEqual(str(context.exception), "Unauthorized")

    def test_failure_envelope_default_message(self):
        session = StreamSession.for_kind(GenerationKind.OUTLINE)
        with self.assertRaises(GenerationFailedException) as context:
            session.apply_envelope({"success": False})
        self.assertEqual(str(context.exception), "Outline generation failed")

    def test_untyped_object_is_implicit_done(self):
        session = StreamSession.for_kind(GenerationKind.OUTLINE)
        session.apply_envelope({"outline": {"totalChapters": 3, "targetWordCount": 1}})
        outline = session.finish()
        self.assertIsInstance(outline, NovelOutline)
        self.assertEqual(outline.total_chapters, 3)

    def test_untyped_object_without_payload(self):
        session = StreamSession.for_kind(GenerationKind.OUTLINE)
        session.apply_envelope({"success": True})
        with self.assertRaises(GenerationFailedException):
            session.finish()


class TestAbort(unittest.TestCase):
    """測試中止"""

    def test_abort_runs_hooks_once(self):
        session = StreamSession.for_kind(GenerationKind.CHAPTERS)
        hook = Mock()
        session.add_abort_hook(hook)
        session.abort()
        session.abort()
        self.assertTrue(session.aborted)
        hook.assert_called_once()

    def test_hook_added_after_abort_runs_immediately(self):
        session = StreamSession.for_kind(GenerationKind.CHAPTERS)
        session.abort()
        hook = Mock()
        session.add_abort_hook(hook)
        hook.assert_called_once()

    def test_failing_hook_does_not_break_abort(self):
        session = StreamSession.for_kind(GenerationKind.CHAPTERS)
        session.add_abort_hook(Mock(side_effect=OSError("already closed")))
        session.abort()
        self.assertTrue(session.aborted)

    def test_finish_after_abort(self):
        """中止後即使已收到done也以中止結束"""
        session = StreamSession.for_kind(GenerationKind.CHAPTERS)
        session.feed(b'data: {"type":"done","success":true}\n')
        session.abort()
        with self.assertRaises(StreamAbortedException):
            session.finish()


if __name__ == '__main__':
    unittest.main()
