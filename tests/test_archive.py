"""Tests for :mod:`tidalwav.services.archive`."""

import io
import os
import shutil
import tempfile
import zipfile
from unittest import TestCase

from flask import Flask

from tidalwav import serializer
from tidalwav.domain import Submission, Track
from tidalwav.services import archive

SUBMISSION_ID = '6fa459ea-ee8a-4ca4-894e-db77e160355e'


class TestStreamArchive(TestCase):
    """Build archives from files in a temp uploads root."""

    def setUp(self):
        """Write a cover and three audio files to disk."""
        self.root = tempfile.mkdtemp()
        os.makedirs(os.path.join(self.root, SUBMISSION_ID))
        for name in ('cover.png', 'a.mp3', 'b.wav', 'c.flac'):
            with open(os.path.join(self.root, SUBMISSION_ID, name), 'wb') as f:
                f.write(name.encode('utf-8') * 100)
        self.app = Flask('test')
        self.app.config['UPLOADS_ROOT'] = self.root
        self.ctx = self.app.app_context()
        self.ctx.push()
        self.submission = Submission(
            submission_id=SUBMISSION_ID,
            album_name='Test',
            cover=f'{SUBMISSION_ID}/cover.png',
            tracks=[
                Track(index=1, title='A', file=f'{SUBMISSION_ID}/a.mp3',
                      original_file_name='a.mp3'),
                Track(index=2, title='B', file=f'{SUBMISSION_ID}/b.wav',
                      original_file_name='Bee.wav'),
                Track(index=3, title='C', file=f'{SUBMISSION_ID}/c.flac'),
            ]
        )

    def tearDown(self):
        self.ctx.pop()
        shutil.rmtree(self.root, ignore_errors=True)

    def open_archive(self):
        chunks = list(archive.stream_archive(self.submission))
        self.assertGreater(len(chunks), 1, 'Archive is produced in pieces')
        return zipfile.ZipFile(io.BytesIO(b''.join(chunks)))

    def test_complete_archive(self):
        """N tracks and a cover give N + 2 entries."""
        with self.open_archive() as zf:
            self.assertIsNone(zf.testzip())
            self.assertEqual(
                zf.namelist(),
                ['metadata.json', 'cover.png', 'a.mp3', 'Bee.wav',
                 'track-3.flac']
            )
            self.assertEqual(zf.read('a.mp3'), b'a.mp3' * 100)

    def test_metadata_entry(self):
        """The metadata entry loads as the stored record."""
        with self.open_archive() as zf:
            data = zf.read('metadata.json').decode('utf-8')
        self.assertEqual(
            serializer.submission_from_dict(serializer.loads(data)),
            self.submission
        )

    def test_missing_assets_are_skipped(self):
        """Assets that are no longer on disk are left out."""
        os.unlink(os.path.join(self.root, SUBMISSION_ID, 'b.wav'))
        self.submission.cover = None
        self.submission.tracks.append(Track(index=4, title='No file'))
        with self.open_archive() as zf:
            self.assertEqual(zf.namelist(),
                             ['metadata.json', 'a.mp3', 'track-3.flac'])

    def test_duplicate_names(self):
        """Entries that would share a name are renamed."""
        self.submission.tracks[1].original_file_name = 'a.mp3'
        names = [name for name, _ in archive.asset_entries(self.submission)]
        self.assertEqual(names, ['cover.png', 'a.mp3', 'a (2).mp3',
                                 'track-3.flac'])

    def test_large_asset_in_bounded_chunks(self):
        """A large file is streamed in pieces, not held whole in memory."""
        content = os.urandom(5 * 1024 * 1024)
        with open(os.path.join(self.root, SUBMISSION_ID, 'b.wav'), 'wb') as f:
            f.write(content)
        chunks = list(archive.stream_archive(self.submission))
        self.assertLess(max(len(chunk) for chunk in chunks), 1024 * 1024)
        with zipfile.ZipFile(io.BytesIO(b''.join(chunks))) as zf:
            self.assertIsNone(zf.testzip())
            self.assertEqual(zf.read('Bee.wav'), content)
