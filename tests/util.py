"""Helpers for tests."""

import os
import shutil
import tempfile
from unittest import TestCase

from tidalwav.factory import create_web_app


class AppTestCase(TestCase):
    """Provides an app whose records and uploads live in a temp directory."""

    def setUp(self):
        """Create the app and a test client."""
        self.root = tempfile.mkdtemp()
        self.uploads_root = os.path.join(self.root, 'uploads')
        self.datafile = os.path.join(self.root, 'data', 'submissions.json')
        os.makedirs(self.uploads_root)

        self.app = create_web_app()
        self.app.config.update({
            'TESTING': True,
            'SECRET_KEY': 'test-secret',
            'ADMIN_PASS': 'adminpass',
            'ADMIN_PASSWORD_HASH': None,
            'RECORD_STORE': 'datafile',
            'SUBMISSIONS_FILE': self.datafile,
            'UPLOADS_ROOT': self.uploads_root,
        })
        self.client = self.app.test_client()

    def tearDown(self):
        """Remove the temp directory."""
        shutil.rmtree(self.root, ignore_errors=True)
