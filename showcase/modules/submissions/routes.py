"""
Submission Routes
=================

GET /upload  -- submission form
POST /upload -- validate, store screenshots, persist a pending project

Form fields keep the public names (projectName, projectLink, studentName,
teacherName, moduleName, screenshots) so existing upload forms keep working.
"""

from urllib.parse import urlparse

from flask import render_template, request

from showcase.core.config import Config, get_config_value
from showcase.core.database import get_db
from showcase.core.logging_service import LoggingService
from showcase.core.storage import (
    UploadTooLarge, allowed_file, delete_uploads, read_upload, save_upload, unique_filename
)
from . import submissions_bp

# Public form field -> projects column
FORM_FIELDS = {
    'projectName': 'project_name',
    'projectLink': 'project_link',
    'studentName': 'student_name',
    'teacherName': 'teacher_name',
    'moduleName': 'module_name',
}

SUCCESS_MESSAGE = 'Project submitted successfully! It will be visible after admin approval.'
INVALID_LINK = 'Project link must be an http:// or https:// address'


class SubmissionError(ValueError):
    """A submission failed validation; the message is shown on the form."""


@submissions_bp.app_template_test('http_url')
def is_http_url(value):
    """True for an absolute http(s) URL with a host; used before rendering a link"""
    if not isinstance(value, str):
        return False
    parsed = urlparse(value.strip())
    return parsed.scheme in ('http', 'https') and bool(parsed.netloc)


def _size_limit_message():
    max_size = int(get_config_value('MAX_SCREENSHOT_SIZE', Config.MAX_SCREENSHOT_SIZE))
    return f'Each screenshot must be {max_size // (1024 * 1024)}MB or smaller'


def render_upload_form(error=None, form_data=None, status=200):
    return render_template('submissions/upload.html', error=error, form_data=form_data or {}), status


def validate_submission(form, files):
    """Check a submission and return (fields, files) ready to store.

    Raises:
        SubmissionError: with the message to show on the form
    """
    expected = int(get_config_value('SCREENSHOT_COUNT', Config.SCREENSHOT_COUNT))
    screenshots = [f for f in files if f and f.filename]

    if len(screenshots) != expected:
        raise SubmissionError(f'Please upload exactly {expected} screenshots')

    fields = {column: form.get(name, '').strip() for name, column in FORM_FIELDS.items()}
    if not fields['project_name'] or not fields['module_name']:
        raise SubmissionError('Project name and module are required')
    fields['project_link'] = fields['project_link'] or None
    if fields['project_link'] and not is_http_url(fields['project_link']):
        raise SubmissionError(INVALID_LINK)

    if not all(allowed_file(f.filename) for f in screenshots):
        raise SubmissionError('Screenshots must be image files')

    return fields, screenshots


def store_screenshots(screenshots):
    """Read and save each screenshot in upload order. Returns the stored filenames.

    Nothing is left on disk if any file fails.
    """
    payloads = []
    for file in screenshots:
        try:
            payloads.append((read_upload(file), unique_filename(file.filename)))
        except UploadTooLarge:
            raise SubmissionError(_size_limit_message())

    stored = []
    try:
        for data, filename in payloads:
            stored.append(save_upload(data, filename))
    except OSError:
        delete_uploads(stored)
        raise
    return stored


@submissions_bp.route('/upload', methods=['GET'])
def upload_form():
    """Submission form"""
    return render_upload_form()


@submissions_bp.route('/upload', methods=['POST'])
def upload_project():
    """Handle a project submission"""
    form_data = request.form.to_dict()

    try:
        fields, screenshots = validate_submission(request.form, request.files.getlist('screenshots'))
        stored = store_screenshots(screenshots)
    except SubmissionError as e:
        return render_upload_form(str(e), form_data, 400)
    except Exception as e:
        LoggingService.log_error_with_traceback('submissions', e)
        return render_upload_form('Error uploading project. Please try again.', form_data, 500)

    fields['screenshots'] = stored
    try:
        project_id = get_db().add_project(fields)
    except Exception as e:
        delete_uploads(stored)
        LoggingService.log_error_with_traceback('submissions', e)
        return render_upload_form('Error uploading project. Please try again.', form_data, 500)

    LoggingService.info('submissions', f"New project submitted: {fields['project_name']}",
                        {'project_id': project_id, 'module': fields['module_name']})
    return render_template('submissions/success.html', message=SUCCESS_MESSAGE)
