"""End-to-end tests for the web application."""

import io
import json
import os
import shutil
import tempfile
import uuid
import zipfile
from http import HTTPStatus
from unittest import mock

from tidalwav.auth import LoginThrottle
from tidalwav.exceptions import SaveError

from .util import AppTestCase


class SubmitMixin:
    """Helpers to submit albums and log in."""

    def submit(self, tracks, cover=True, audio=(), **fields):
        data = {'albumName': 'Test', 'releaseDate': '2024-06-01',
                'platforms': 'Spotify, Tidal', 'numSongs': '1',
                'tracks': json.dumps(tracks) if not isinstance(tracks, str)
                else tracks}
        data.update(fields)
        if cover:
            data['cover'] = (io.BytesIO(b'\x89PNGcover'), 'cover.png')
        if audio:
            data['trackFiles'] = [(io.BytesIO(name.encode('utf-8')), name)
                                  for name in audio]
        return self.client.post('/submit', data=data,
                                content_type='multipart/form-data')

    def login(self, password='adminpass'):
        return self.client.post('/admin/login', data={'password': password})


class TestSubmit(SubmitMixin, AppTestCase):
    """Submitting albums through ``POST /submit``."""

    def test_submit_and_review(self):
        """A submitted album can be looked up by an admin."""
        response = self.submit([{'title': 'A', 'fileName': 'a.mp3'}],
                               audio=['a.mp3'])
        self.assertEqual(response.status_code, HTTPStatus.OK)
        body = response.get_json()
        self.assertTrue(body['ok'])
        submission_id = body['id']
        self.assertEqual(str(uuid.UUID(submission_id)), submission_id)

        self.login()
        response = self.client.get(f'/admin/api/submissions/{submission_id}')
        self.assertEqual(response.status_code, HTTPStatus.OK)
        record = response.get_json()
        self.assertEqual(record['status'], 'pending')
        self.assertEqual(record['albumName'], 'Test')
        self.assertEqual(record['platforms'], ['Spotify', 'Tidal'])
        self.assertEqual(record['tracks'][0]['file'],
                         os.path.join(submission_id, 'a.mp3'))
        self.assertEqual(record['tracks'][0]['originalFileName'], 'a.mp3')
        self.assertEqual(record['cover'],
                         os.path.join(submission_id, 'cover.png'))
        self.assertTrue(os.path.isfile(
            os.path.join(self.uploads_root, submission_id, 'a.mp3')
        ))

    def test_files_matched_by_name(self):
        """Tracks get their declared file whatever the upload order."""
        response = self.submit(
            [{'title': 'A', 'fileName': 'a.mp3'},
             {'title': 'B', 'fileName': 'b.mp3'}],
            audio=['b.mp3', 'a.mp3']
        )
        submission_id = response.get_json()['id']
        self.login()
        record = self.client.get(
            f'/admin/api/submissions/{submission_id}'
        ).get_json()
        self.assertEqual([t['originalFileName'] for t in record['tracks']],
                         ['a.mp3', 'b.mp3'])

    def test_track_without_upload(self):
        """A declared track with no upload has no file; not an error."""
        response = self.submit([{'title': 'A', 'fileName': 'a.mp3'}],
                               cover=False)
        self.assertEqual(response.status_code, HTTPStatus.OK)
        self.login()
        record = self.client.get(
            f"/admin/api/submissions/{response.get_json()['id']}"
        ).get_json()
        self.assertEqual(len(record['tracks']), 1)
        self.assertIsNone(record['tracks'][0]['file'])
        self.assertIsNone(record['cover'])

    def test_tracks_independent_of_num_songs(self):
        """The track list is what was declared, whatever ``numSongs`` says."""
        response = self.submit([{'title': 'A'}, {'title': 'B'}],
                               numSongs='5')
        self.login()
        record = self.client.get(
            f"/admin/api/submissions/{response.get_json()['id']}"
        ).get_json()
        self.assertEqual(record['numSongs'], 5)
        self.assertEqual(len(record['tracks']), 2)

    def test_loose_track_types(self):
        """Any list of track objects is accepted, whatever the value types."""
        response = self.submit([{'title': 'A', 'featured': ['X', 'Y']},
                                {'title': 7}])
        self.assertEqual(response.status_code, HTTPStatus.OK)
        self.login()
        record = self.client.get(
            f"/admin/api/submissions/{response.get_json()['id']}"
        ).get_json()
        self.assertEqual(record['tracks'][0]['featured'], 'X, Y')
        self.assertEqual(record['tracks'][1]['title'], '7')

    def test_invalid_metadata(self):
        """Malformed track metadata is a 400, and nothing is stored."""
        response = self.submit('[{"title": "A"', audio=['a.mp3'])
        self.assertEqual(response.status_code, HTTPStatus.BAD_REQUEST)
        self.assertEqual(response.get_json(),
                         {'error': 'Invalid tracks metadata'})
        self.assertEqual(os.listdir(self.uploads_root), [],
                         'No files are written')
        self.assertFalse(os.path.exists(self.datafile))

    @mock.patch('tidalwav.controllers.submission.records')
    def test_save_failure(self, mock_records):
        """A failure to save the record is a 500."""
        mock_records.add_submission.side_effect = SaveError('disk full')
        response = self.submit([{'title': 'A'}])
        self.assertEqual(response.status_code,
                         HTTPStatus.INTERNAL_SERVER_ERROR)
        self.assertEqual(response.get_json(),
                         {'error': 'Internal server error'})


class TestAdmin(SubmitMixin, AppTestCase):
    """Admin login, review, and download."""

    def test_wrong_password(self):
        """A wrong password goes back to the login page with a flag."""
        response = self.login('not-the-password')
        self.assertEqual(response.status_code, HTTPStatus.FOUND)
        self.assertTrue(
            response.headers['Location'].endswith('/admin/login?err=1')
        )
        response = self.client.get('/admin/api/submissions')
        self.assertEqual(response.status_code, HTTPStatus.FOUND,
                         'Unauthenticated requests are redirected')
        self.assertTrue(response.headers['Location'].endswith('/admin/login'))

    def test_login_and_logout(self):
        """The admin session lasts until logout."""
        response = self.login()
        self.assertEqual(response.status_code, HTTPStatus.FOUND)
        self.assertTrue(
            response.headers['Location'].endswith('/admin/dashboard')
        )
        self.assertEqual(self.client.get('/admin/api/submissions').status_code,
                         HTTPStatus.OK)
        self.assertEqual(self.client.get('/admin/dashboard').status_code,
                         HTTPStatus.OK)
        self.client.get('/admin/logout')
        self.assertEqual(self.client.get('/admin/api/submissions').status_code,
                         HTTPStatus.FOUND)

    def test_login_throttled(self):
        """Repeated failures lock the client out for a while."""
        self.app.extensions['login_throttle'] = LoginThrottle(max_attempts=2)
        self.login('wrong')
        self.login('wrong')
        response = self.login()
        self.assertTrue(
            response.headers['Location'].endswith('/admin/login?err=1')
        )

    def test_list_in_order(self):
        """Submissions are listed in the order they were received."""
        first = self.submit([{'title': 'A'}], albumName='First')
        second = self.submit([{'title': 'B'}], albumName='Second')
        self.login()
        records = self.client.get('/admin/api/submissions').get_json()
        self.assertEqual([r['id'] for r in records],
                         [first.get_json()['id'], second.get_json()['id']])

    def test_approve_twice(self):
        """Approving again keeps the status and replaces the note."""
        submission_id = self.submit([{'title': 'A'}]).get_json()['id']
        self.login()
        path = f'/admin/api/submissions/{submission_id}'
        for note in ('first note', 'second note'):
            response = self.client.post(f'{path}/approve', json={'note': note})
            self.assertEqual(response.get_json(), {'ok': True})
        record = self.client.get(path).get_json()
        self.assertEqual(record['status'], 'approved')
        self.assertEqual(record['adminNote'], 'second note')

    def test_dashboard_counts_pending(self):
        """The dashboard shows how many submissions await review."""
        first = self.submit([{'title': 'A'}]).get_json()['id']
        self.submit([{'title': 'B'}])
        self.login()
        self.client.post(f'/admin/api/submissions/{first}/approve')
        page = self.client.get('/admin/dashboard').get_data(as_text=True)
        self.assertIn('1 awaiting review', page)
        self.assertIn('class="approved"', page)

    def test_reject_without_body(self):
        """Rejecting without a note stores no note."""
        submission_id = self.submit([{'title': 'A'}]).get_json()['id']
        self.login()
        path = f'/admin/api/submissions/{submission_id}'
        response = self.client.post(f'{path}/reject')
        self.assertEqual(response.status_code, HTTPStatus.OK)
        record = self.client.get(path).get_json()
        self.assertEqual(record['status'], 'rejected')
        self.assertIsNone(record['adminNote'])

    def test_unknown_submission(self):
        """Unknown ids are a 404 in the API."""
        self.login()
        path = f'/admin/api/submissions/{uuid.uuid4()}'
        response = self.client.get(path)
        self.assertEqual(response.status_code, HTTPStatus.NOT_FOUND)
        self.assertEqual(response.get_json(), {'error': 'Not found'})
        response = self.client.post(f'{path}/approve', json={})
        self.assertEqual(response.status_code, HTTPStatus.NOT_FOUND)

    def test_download(self):
        """The archive holds the metadata, cover, and audio files."""
        submission_id = self.submit(
            [{'title': 'A', 'fileName': 'a.mp3'},
             {'title': 'B', 'fileName': 'b.mp3'}],
            audio=['b.mp3', 'a.mp3'], albumName='Déjà Vu!'
        ).get_json()['id']
        self.login()
        response = self.client.get(f'/admin/download/{submission_id}')
        self.assertEqual(response.status_code, HTTPStatus.OK)
        self.assertEqual(response.mimetype, 'application/zip')
        self.assertEqual(response.headers['Content-Disposition'],
                         'attachment; filename=Deja_Vu_.zip')
        with zipfile.ZipFile(io.BytesIO(response.data)) as zf:
            self.assertEqual(sorted(zf.namelist()),
                             ['a.mp3', 'b.mp3', 'cover.png', 'metadata.json'])
            metadata = json.loads(zf.read('metadata.json'))
        record = self.client.get(
            f'/admin/api/submissions/{submission_id}'
        ).get_json()
        self.assertEqual(metadata, record)

    def test_download_errors(self):
        """Unknown submissions and missing files are plain-text 404s."""
        self.login()
        response = self.client.get(f'/admin/download/{uuid.uuid4()}')
        self.assertEqual(response.status_code, HTTPStatus.NOT_FOUND)
        self.assertEqual(response.get_data(as_text=True), 'Not found')

        submission_id = self.submit([{'title': 'A'}], cover=False).get_json()['id']
        response = self.client.get(f'/admin/download/{submission_id}')
        self.assertEqual(response.status_code, HTTPStatus.NOT_FOUND)
        self.assertEqual(response.mimetype, 'text/plain')
        self.assertEqual(response.get_data(as_text=True), 'Files missing')

    def test_download_requires_login(self):
        """Downloads are for admins only."""
        submission_id = self.submit([{'title': 'A'}]).get_json()['id']
        response = self.client.get(f'/admin/download/{submission_id}')
        self.assertEqual(response.status_code, HTTPStatus.FOUND)

    def test_uploaded_file(self):
        """Stored assets can be previewed by admins."""
        submission_id = self.submit([{'title': 'A'}]).get_json()['id']
        path = f'/uploads/{submission_id}/cover.png'
        self.assertEqual(self.client.get(path).status_code, HTTPStatus.FOUND)
        self.login()
        response = self.client.get(path)
        self.assertEqual(response.data, b'\x89PNGcover')
        response.close()


class TestPages(AppTestCase):
    """Pages and service status."""

    def test_pages(self):
        """The submission form and login page render."""
        self.assertEqual(self.client.get('/').status_code, HTTPStatus.OK)
        response = self.client.get('/admin/login?err=1')
        self.assertEqual(response.status_code, HTTPStatus.OK)
        self.assertIn(b'Incorrect password', response.data)

    def test_status(self):
        """The service is up when records and uploads are reachable."""
        response = self.client.get('/status')
        self.assertEqual(response.status_code, HTTPStatus.OK)
        self.app.config['UPLOADS_ROOT'] = os.path.join(self.root, 'nope')
        response = self.client.get('/status')
        self.assertEqual(response.status_code, HTTPStatus.SERVICE_UNAVAILABLE)
        self.assertIn('error', response.get_json())


class TestDatabaseBackedApp(SubmitMixin, AppTestCase):
    """The same workflow with records kept in a database."""

    def setUp(self):
        """Configure the database backend before the app is created."""
        self.data_dir = tempfile.mkdtemp()
        self.env = mock.patch.dict(os.environ, {
            'RECORD_STORE': 'database',
            'DATA_DIR': self.data_dir,
            'SQLALCHEMY_DATABASE_URI': 'sqlite://',
        })
        self.env.start()
        super(TestDatabaseBackedApp, self).setUp()
        self.app.config['RECORD_STORE'] = 'database'

    def tearDown(self):
        super(TestDatabaseBackedApp, self).tearDown()
        self.env.stop()
        shutil.rmtree(self.data_dir, ignore_errors=True)

    def test_submit_and_review(self):
        """Submissions are stored and reviewed through the database."""
        submission_id = self.submit(
            [{'title': 'A'}, {'title': 'B'}], audio=['x.mp3', 'y.mp3']
        ).get_json()['id']
        self.login()
        path = f'/admin/api/submissions/{submission_id}'
        self.client.post(f'{path}/reject', json={'note': 'Too quiet'})
        record = self.client.get(path).get_json()
        self.assertEqual(record['status'], 'rejected')
        self.assertEqual(record['adminNote'], 'Too quiet')
        self.assertEqual([t['originalFileName'] for t in record['tracks']],
                         ['x.mp3', 'y.mp3'], 'Files are matched by position')
        self.assertFalse(os.path.exists(self.datafile))
