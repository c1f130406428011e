"""
Flask configuration.

Every parameter may be overridden by an environment variable of the same
name.
"""
import os

ON = 'yes'

DEBUG = os.environ.get('DEBUG') == ON
"""enable/disable debug mode"""

TESTING = os.environ.get('TESTING') == ON
"""enable/disable testing mode"""

SECRET_KEY = os.environ.get('SECRET_KEY', 'tidalwav-demo-secret')
"""Signs the session cookie that carries the admin flag."""

ADMIN_PASS = os.environ.get('ADMIN_PASS', 'adminpass')
"""
Shared admin password.

The default is a well-known demo value; set ``ADMIN_PASS`` or, better,
``ADMIN_PASSWORD_HASH`` in any real deployment.
"""

ADMIN_PASSWORD_HASH = os.environ.get('ADMIN_PASSWORD_HASH')
"""
Password hash produced by :func:`werkzeug.security.generate_password_hash`.

When set, it takes precedence over ``ADMIN_PASS``.
"""

LOGIN_MAX_ATTEMPTS = int(os.environ.get('LOGIN_MAX_ATTEMPTS', 5))
"""Failed logins allowed per client address within the window (0 = off)."""

LOGIN_WINDOW_SECONDS = int(os.environ.get('LOGIN_WINDOW_SECONDS', 300))

DATA_DIR = os.environ.get('DATA_DIR', os.path.abspath('data'))
SUBMISSIONS_FILE = os.environ.get(
    'SUBMISSIONS_FILE',
    os.path.join(DATA_DIR, 'submissions.json')
)
"""JSON document holding the list of submission records."""

UPLOADS_ROOT = os.environ.get('UPLOADS_ROOT', os.path.abspath('uploads'))
"""Root of the per-submission asset directories."""

RECORD_STORE = os.environ.get('RECORD_STORE', 'datafile')
"""Record store backend: ``datafile`` or ``database``."""

SQLALCHEMY_DATABASE_URI = os.environ.get(
    'SQLALCHEMY_DATABASE_URI',
    'sqlite:///%s' % os.path.join(DATA_DIR, 'submissions.db')
)
SQLALCHEMY_TRACK_MODIFICATIONS = False

ARCHIVE_COMPRESSION_LEVEL = int(os.environ.get('ARCHIVE_COMPRESSION_LEVEL', 9))

MAX_CONTENT_LENGTH = os.environ.get('MAX_CONTENT_LENGTH')
"""Upload size limit in bytes; unset means no limit."""
if MAX_CONTENT_LENGTH is not None:
    MAX_CONTENT_LENGTH = int(MAX_CONTENT_LENGTH)

LOGLEVEL = int(os.environ.get('LOGLEVEL', 20))
