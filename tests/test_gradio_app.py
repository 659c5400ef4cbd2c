"""
Smoke tests for the admin page layout.
"""

import unittest
from unittest.mock import MagicMock

import gradio as gr

from frame_manager.frontend.gradio_app import create_app
from frame_manager.frontend.upload_tab import idle_button, uploading_button


class TestCreateApp(unittest.TestCase):

    def test_builds_without_calling_backend(self):
        client = MagicMock()
        app = create_app(client)
        self.assertIsInstance(app, gr.Blocks)
        self.assertEqual(client.method_calls, [])

    def test_has_sign_out_link(self):
        app = create_app(MagicMock())
        links = [
            block.link for block in app.blocks.values()
            if isinstance(block, gr.Button) and getattr(block, "link", None)
        ]
        self.assertIn("/logout", links)

    def test_upload_button_is_disabled_then_restored(self):
        app = create_app(MagicMock())
        # dict in Gradio 5, list in Gradio 4
        fns = app.fns.values() if isinstance(app.fns, dict) else app.fns
        wired = [block_fn.fn for block_fn in fns]
        self.assertIn(uploading_button, wired)
        self.assertIn(idle_button, wired)
        self.assertLess(wired.index(uploading_button), wired.index(idle_button))

if __name__ == "__main__":
    unittest.main()
