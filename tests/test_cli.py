"""
測試命令列介面
"""

import unittest
import sys
import os
from unittest.mock import Mock, patch

from click.testing import CliRunner

# 添加專案根目錄到 Python 路徑
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from novel_client.cli import main

ENV = {"NOVEL_API_BASE_URL": "http://example.test", "NOVEL_API_TOKEN": None, "NOVEL_AI_API_KEY": None}


def streaming_response(body: str):
    response = Mock()
    response.status_code = 200
    response.raw = Mock()
    response.iter_content.return_value = iter([body.encode("utf-8")])
    return response


def json_response(data, status_code=200):
    response = Mock()
    response.status_code = status_code
    response.json.return_value = data
    return response


class TestStreamCommands(unittest.TestCase):
    """測試串流生成命令"""

    def setUp(self):
        self.runner = CliRunner()

    @patch("novel_client.services.api_connector.requests.post")
    def test_outline_command(self, mock_post):
        mock_post.return_value = streaming_response(
            'data: {"type":"volume_complete","volumeIndex":0,"totalVolumes":1,"volumeTitle":"起"}\n\n'
            'data: {"type":"done","success":true,"outline":{"totalChapters":10,"volumes":[]}}\n\n'
        )

        result = self.runner.invoke(
            main, ["--token", "secret", "--ai-model", "m1", "outline", "p1", "--chapters", "10"], env=ENV
        )

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn('"totalChapters": 10', result.output)
        self.assertIn("[volume_complete]", result.output)

        args, kwargs = mock_post.call_args
        self.assertEqual(args[0], "http://example.test/api/projects/p1/outline")
        self.assertEqual(kwargs["json"], {"targetChapters": 10, "targetWordCount": 100})
        self.assertEqual(kwargs["headers"]["Authorization"], "Bearer secret")
        self.assertEqual(kwargs["headers"]["x-custom-model"], "m1")

    @patch("novel_client.services.api_connector.requests.post")
    def test_chapters_failure_exit_code(self, mock_post):
        mock_post.return_value = streaming_response(
            'data: {"type":"done","success":false,"error":"quota exceeded"}\n\n'
        )

        result = self.runner.invoke(main, ["chapters", "p1", "--count", "2"], env=ENV)

        self.assertEqual(result.exit_code, 1)
        self.assertIn("quota exceeded", result.output)

    @patch("novel_client.services.api_connector.requests.post")
    def test_chapters_payload(self, mock_post):
        mock_post.return_value = streaming_response(
            'data: {"type":"chapter_complete","chapterIndex":5,"title":"E"}\n\n'
            'data: {"type":"done","success":true}\n\n'
        )

        result = self.runner.invoke(
            main, ["chapters", "p1", "--count", "2", "--index", "5", "--regenerate"], env=ENV
        )

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertEqual(
            mock_post.call_args[1]["json"],
            {"chaptersToGenerate": 2, "index": 5, "regenerate": True}
        )
        self.assertIn('"title": "E"', result.output)

    @patch("novel_client.services.api_connector.requests.post")
    def test_add_volumes_validation(self, mock_post):
        """參數超出範圍時顯示錯誤訊息而非堆疊"""
        result = self.runner.invoke(main, ["add-volumes", "p1", "--volumes", "0"], env=ENV)

        self.assertEqual(result.exit_code, 1)
        self.assertIsInstance(result.exception, SystemExit)
        self.assertIn("new_volume_count", result.output)
        mock_post.assert_not_called()


class TestTaskCommands(unittest.TestCase):
    """測試任務查詢命令"""

    def setUp(self):
        self.runner = CliRunner()

    @patch("novel_client.services.api_connector.requests.get")
    def test_task_command(self, mock_get):
        mock_get.return_value = json_response({"task": {
            "id": 7, "targetCount": 4, "completedChapters": [1, 2], "status": "running"
        }})

        result = self.runner.invoke(main, ["task", "p1"], env=ENV)

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn('"status": "running"', result.output)
        self.assertEqual(mock_get.call_args[0][0], "http://example.test/api/projects/p1/active-task")

    @patch("novel_client.services.api_connector.requests.get")
    def test_tasks_command_error(self, mock_get):
        mock_get.return_value = json_response({"error": "unauthorized"}, status_code=401)

        result = self.runner.invoke(main, ["tasks"], env=ENV)

        self.assertEqual(result.exit_code, 1)
        self.assertIn("unauthorized", result.output)

    @patch("novel_client.services.api_connector.requests.post")
    def test_cancel_command(self, mock_post):
        mock_post.return_value = json_response({"success": True})

        result = self.runner.invoke(main, ["cancel", "p1"], env=ENV)

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertEqual(mock_post.call_args[0][0], "http://example.test/api/projects/p1/active-tasks/cancel")

    @patch("novel_client.services.api_connector.requests.post")
    def test_pause_command_failure(self, mock_post):
        mock_post.return_value = json_response({"success": False})

        result = self.runner.invoke(main, ["pause", "p1", "3"], env=ENV)

        self.assertEqual(result.exit_code, 1)
        self.assertIn("Failed to pause task", result.output)
        self.assertEqual(mock_post.call_args[0][0], "http://example.test/api/projects/p1/tasks/3/pause")

    @patch("novel_client.services.api_connector.requests.post")
    def test_cancel_task_command(self, mock_post):
        mock_post.return_value = json_response({"success": True})

        result = self.runner.invoke(main, ["cancel-task", "8"], env=ENV)

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertEqual(mock_post.call_args[0][0], "http://example.test/api/tasks/8/cancel")


if __name__ == '__main__':
    unittest.main()
