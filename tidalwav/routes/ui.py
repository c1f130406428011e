"""Provides routes for the submission form and the admin pages."""

from flask import Blueprint, Response, current_app, make_response, \
    redirect, render_template, request, send_from_directory, \
    stream_with_context, url_for
from werkzeug.exceptions import InternalServerError, NotFound

from .. import auth
from ..controllers import review
from ..services import records
from . import plaintext_exception

blueprint = Blueprint('ui', __name__, url_prefix='')

blueprint.register_error_handler(NotFound, plaintext_exception)
blueprint.register_error_handler(InternalServerError, plaintext_exception)


@blueprint.route('/', methods=['GET'])
def submit_form() -> Response:
    """Render the album submission form."""
    return make_response(render_template('submit/index.html',
                                         pagetitle='Submit an album'))


@blueprint.route('/admin/login', methods=['GET'])
def login() -> Response:
    """Render the admin login form."""
    rendered = render_template('admin/login.html', pagetitle='Admin login',
                               failed=request.args.get('err') == '1')
    return make_response(rendered)


@blueprint.route('/admin/login', methods=['POST'])
def do_login() -> Response:
    """Check the admin password, and start an admin session if it matches."""
    if auth.authenticate(request.form.get('password'),
                         request.remote_addr or 'unknown'):
        return redirect(url_for('ui.dashboard'))
    return redirect(url_for('ui.login', err=1))


@blueprint.route('/admin/logout', methods=['GET'])
def logout() -> Response:
    """End the admin session."""
    auth.end_session()
    return redirect(url_for('ui.login'))


@blueprint.route('/admin/dashboard', methods=['GET'])
@auth.admin_required
def dashboard() -> Response:
    """Render the list of submissions for review."""
    rendered = render_template('admin/dashboard.html',
                               pagetitle='Submissions',
                               submissions=records.load_all())
    return make_response(rendered)


@blueprint.route('/admin/download/<submission_id>', methods=['GET'])
@auth.admin_required
def download_submission(submission_id: str) -> Response:
    """Stream a submission's metadata and files as a ZIP archive."""
    content, code, headers = review.download_submission(submission_id)
    response = Response(stream_with_context(content), status=code,
                        headers=headers)
    return response


@blueprint.route('/uploads/<path:filename>', methods=['GET'])
@auth.admin_required
def uploaded_file(filename: str) -> Response:
    """Serve a stored asset, e.g. to preview a cover or a track."""
    return send_from_directory(current_app.config['UPLOADS_ROOT'], filename)
