"""
Tests for the frames list: fetch, toggle, delete (storage first, then row)
and the panel handlers that wrap them.
"""

import unittest
from datetime import datetime, timedelta
from unittest.mock import MagicMock, patch

import gradio as gr

from frame_manager.backend.models import Frame
from frame_manager.frontend.client import BackendError
from frame_manager.frontend.frame_list import (
    EMPTY_MESSAGE,
    LOADING_MESSAGE,
    FrameListPanel,
    delete_frame,
    describe_frame,
    fetch_frames,
    format_created,
    placeholder_for,
    storage_key_from_url,
    thumbnail_html,
    toggle_frame,
)
from frame_manager.frontend.upload_tab import upload_frame
from tests.harness import BackendHarness


class TestHelpers(unittest.TestCase):

    def test_storage_key_from_public_url(self):
        url = "http://127.0.0.1:8001/storage/v1/object/public/frames/1718000000123.png"
        self.assertEqual(storage_key_from_url(url, "frames"), "1718000000123.png")

    def test_storage_key_uses_last_bucket_segment(self):
        url = "https://cdn.example.com/frames/storage/v1/object/public/frames/7.png?v=2"
        self.assertEqual(storage_key_from_url(url, "frames"), "7.png")

    def test_storage_key_rejects_foreign_urls(self):
        for url in ("https://example.com/avatars/7.png", "http://backend/storage/v1/object/public/frames/"):
            with self.assertRaises(ValueError):
                storage_key_from_url(url, "frames")

    def test_format_created(self):
        self.assertEqual(format_created("2024-06-01T12:30:00.123456"), "2024-06-01")
        self.assertEqual(format_created("yesterday"), "yesterday")
        self.assertEqual(format_created(None), "")

    def test_row_rendering_escapes_and_shows_status(self):
        frame = {"id": "1", "name": "<b>Summer</b>", "image_url": "http://x/frames/1.png?a=1&b=2",
                 "is_active": False, "created_at": "2024-06-01T12:30:00"}
        self.assertIn("&lt;b&gt;Summer&lt;/b&gt;", thumbnail_html(frame))
        self.assertIn("a=1&amp;b=2", thumbnail_html(frame))
        self.assertIn("Inactive", describe_frame(frame))
        self.assertIn("2024-06-01", describe_frame(frame))


    def test_placeholder_while_loading_and_when_empty(self):
        self.assertEqual(placeholder_for(None), LOADING_MESSAGE)
        self.assertEqual(placeholder_for([]), EMPTY_MESSAGE)
        self.assertEqual(LOADING_MESSAGE, "Loading frames...")
        self.assertEqual(EMPTY_MESSAGE, "No frames uploaded yet")

    def test_no_placeholder_once_frames_exist(self):
        self.assertIsNone(placeholder_for([{"id": "1", "name": "Summer"}]))


class TestListOperationsUnit(unittest.TestCase):
    """List operations against a mocked client"""

    def setUp(self):
        self.client = MagicMock()
        self.client.bucket = "frames"
        self.url = "http://backend/storage/v1/object/public/frames/1.png"

    def test_toggle_twice_restores_value_with_two_updates(self):
        state = True
        state = toggle_frame(self.client, "f-1", state)
        self.assertFalse(state)
        state = toggle_frame(self.client, "f-1", state)
        self.assertTrue(state)
        self.assertEqual(self.client.update_frame.call_count, 2)
        self.client.update_frame.assert_called_with("f-1", {"is_active": True})

    def test_delete_removes_storage_before_row(self):
        delete_frame(self.client, "f-1", self.url)
        self.assertEqual(
            [c[0] for c in self.client.method_calls],
            ["remove", "delete_frame"]
        )
        self.client.remove.assert_called_once_with(["1.png"])

    def test_storage_failure_leaves_row(self):
        self.client.remove.side_effect = BackendError("permission denied", 403)
        with self.assertRaises(BackendError):
            delete_frame(self.client, "f-1", self.url)
        self.client.delete_frame.assert_not_called()

    def test_row_delete_failure_is_logged(self):
        self.client.delete_frame.side_effect = BackendError("timeout")
        with self.assertLogs("frame_manager.frontend.frame_list", level="ERROR") as logs:
            with self.assertRaises(BackendError):
                delete_frame(self.client, "f-1", self.url)
        self.assertIn("f-1", logs.output[0])


class TestListAgainstService(BackendHarness, unittest.TestCase):

    def setUp(self):
        self.start_backend()

    def test_listing_is_newest_first(self):
        base = datetime(2024, 6, 1)
        with self.Session() as db:
            for name, offset in (("b", 5), ("a", 1), ("d", 9), ("c", 7)):
                db.add(Frame(name=name, image_url=f"http://x/frames/{name}.png", created_at=base + timedelta(seconds=offset)))
            db.commit()

        frames = fetch_frames(self.client)
        self.assertEqual([f["name"] for f in frames], ["d", "c", "b", "a"])
        created = [f["created_at"] for f in frames]
        self.assertEqual(created, sorted(created, reverse=True))

    def test_delete_removes_object_and_row(self):
        row = upload_frame(self.client, "Summer", str(self.make_image("summer.png")))
        key = storage_key_from_url(row["image_url"], "frames")

        delete_frame(self.client, row["id"], row["image_url"])

        self.assertEqual(fetch_frames(self.client), [])
        self.assertFalse(self.storage.exists("frames", key))
        self.assertEqual(self.http.get(row["image_url"]).status_code, 404)

    def test_storage_failure_keeps_row_listed(self):
        row = upload_frame(self.client, "Summer", str(self.make_image("summer.png")))
        with patch.object(self.storage, "delete", side_effect=OSError("read-only")):
            with self.assertRaises(BackendError):
                delete_frame(self.client, row["id"], row["image_url"])
        self.assertEqual([f["id"] for f in fetch_frames(self.client)], [row["id"]])

    def test_summer_scenario(self):
        image = self.make_image("summer.png", color=(250, 200, 40))
        upload_frame(self.client, "Summer", str(image))

        (frame,) = fetch_frames(self.client)
        self.assertEqual(frame["name"], "Summer")
        self.assertTrue(frame["is_active"])
        self.assertEqual(self.http.get(frame["image_url"]).content, image.read_bytes())

        toggle_frame(self.client, frame["id"], frame["is_active"])
        (frame,) = fetch_frames(self.client)
        self.assertFalse(frame["is_active"])

        key = storage_key_from_url(frame["image_url"], "frames")
        delete_frame(self.client, frame["id"], frame["image_url"])
        self.assertEqual(fetch_frames(self.client), [])
        self.assertFalse(self.storage.exists("frames", key))


class TestFrameListPanel(BackendHarness, unittest.TestCase):

    def setUp(self):
        self.start_backend()
        self.panel = FrameListPanel(self.client)
        for name in ("info", "warning"):
            patcher = patch(f"frame_manager.frontend.frame_list.gr.{name.capitalize()}")
            setattr(self, name, patcher.start())
            self.addCleanup(patcher.stop)

    def test_reload_failure_warns_and_ends_loading_with_empty_list(self):
        panel = FrameListPanel(MagicMock(**{"select_frames.side_effect": BackendError("down")}))
        self.assertEqual(panel.reload(), [])
        self.warning.assert_called_once_with("Error loading frames")

    def test_toggle_returns_refetched_list(self):
        row = upload_frame(self.client, "Summer", str(self.make_image("summer.png")))
        frames = self.panel.toggle(row["id"], True)
        self.assertFalse(frames[0]["is_active"])
        self.info.assert_called_once_with("Frame deactivated")

    def test_toggle_failure_raises_gradio_error(self):
        with self.assertRaises(gr.Error):
            self.panel.toggle("missing", True)

    def test_confirm_delete_clears_pending_and_refetches(self):
        row = upload_frame(self.client, "Summer", str(self.make_image("summer.png")))
        frames, pending = self.panel.confirm_delete(row["id"], row["image_url"])
        self.assertEqual(frames, [])
        self.assertIsNone(pending)
        self.info.assert_called_once_with("Frame deleted successfully")

    def test_confirm_delete_with_bad_url_raises_gradio_error(self):
        with self.assertRaises(gr.Error):
            self.panel.confirm_delete("f-1", "http://elsewhere/x.png")


if __name__ == "__main__":
    unittest.main()
