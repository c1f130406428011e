"""Provides the submission API and the admin JSON API."""

from flask import Blueprint, request
from werkzeug.exceptions import BadRequest, InternalServerError, NotFound, \
    MethodNotAllowed, RequestEntityTooLarge, ServiceUnavailable

from ..auth import admin_required
from ..controllers import review, status, submission
from ..domain import Submission
from . import json_response, jsonify_exception

blueprint = Blueprint('api', __name__, url_prefix='')

for exception in (BadRequest, NotFound, MethodNotAllowed,
                  RequestEntityTooLarge, InternalServerError,
                  ServiceUnavailable):
    blueprint.register_error_handler(exception, jsonify_exception)


@blueprint.route('/status', methods=['GET', 'HEAD'])
@json_response
def service_status() -> tuple:
    """Status check endpoint."""
    return status.service_status()


@blueprint.route('/submit', methods=['POST'])
@json_response
def create_submission() -> tuple:
    """Accept a new album submission."""
    return submission.create_submission(request.form, request.files)


@blueprint.route('/admin/api/submissions', methods=['GET'])
@admin_required
@json_response
def list_submissions() -> tuple:
    """Get all submission records."""
    return review.list_submissions()


@blueprint.route('/admin/api/submissions/<submission_id>', methods=['GET'])
@admin_required
@json_response
def get_submission(submission_id: str) -> tuple:
    """Get a single submission record."""
    return review.get_submission(submission_id)


@blueprint.route('/admin/api/submissions/<submission_id>/approve',
                 methods=['POST'])
@admin_required
@json_response
def approve_submission(submission_id: str) -> tuple:
    """Approve a submission, with an optional note."""
    return review.review_submission(submission_id, Submission.APPROVED,
                                    request.get_json(silent=True))


@blueprint.route('/admin/api/submissions/<submission_id>/reject',
                 methods=['POST'])
@admin_required
@json_response
def reject_submission(submission_id: str) -> tuple:
    """Reject a submission, with an optional note."""
    return review.review_submission(submission_id, Submission.REJECTED,
                                    request.get_json(silent=True))
